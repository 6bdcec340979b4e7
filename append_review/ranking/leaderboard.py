"""Search, sorting and summary statistics for ranked and archived notes."""

from datetime import datetime, timezone
from typing import Any, Callable, Literal, Sequence

from append_review.domain.note import CamelModel, Note
from append_review.ranking.elo import round_half_away_from_zero

SortField = Literal["rating", "wins", "losses", "lastReviewedAt", "archivedAt", "text"]
SortDirection = Literal["asc", "desc"]

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _timestamp_key(value: datetime | None) -> datetime:
    if value is None:
        return _OLDEST
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


SORT_KEYS: dict[str, Callable[[Note], Any]] = {
    "rating": lambda note: note.rating,
    "wins": lambda note: note.wins,
    "losses": lambda note: note.losses,
    "lastReviewedAt": lambda note: _timestamp_key(note.last_reviewed_at),
    "archivedAt": lambda note: _timestamp_key(note.archived_at),
    "text": lambda note: note.text.lower(),
}


class RankingStats(CamelModel):
    total_notes: int
    average_rating: int
    highest_rating: int
    total_votes: int


def filter_notes(notes: Sequence[Note], query: str | None) -> list[Note]:
    """Keep notes whose text contains the query, ignoring case."""
    if not query or not query.strip():
        return list(notes)
    needle = query.lower()
    return [note for note in notes if needle in note.text.lower()]


def sort_notes(
    notes: Sequence[Note], field: SortField = "rating", direction: SortDirection = "desc"
) -> list[Note]:
    """Sort notes by one of the leaderboard columns. Missing timestamps sort as oldest."""
    if field not in SORT_KEYS:
        raise ValueError(f"Cannot sort notes by {field!r}")
    return sorted(notes, key=SORT_KEYS[field], reverse=direction == "desc")


def ranking_stats(notes: Sequence[Note]) -> RankingStats:
    if not notes:
        return RankingStats(total_notes=0, average_rating=0, highest_rating=0, total_votes=0)

    return RankingStats(
        total_notes=len(notes),
        average_rating=round_half_away_from_zero(sum(n.rating for n in notes) / len(notes)),
        highest_rating=max(n.rating for n in notes),
        total_votes=sum(n.total_votes for n in notes),
    )
