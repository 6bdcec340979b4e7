"""Elo rating updates for pairwise note comparisons."""

import math
from datetime import datetime
from typing import Literal, NamedTuple

from append_review.domain.document import utc_now
from append_review.domain.note import Note

Outcome = Literal["A", "B", "skip"]

DEFAULT_K_FACTOR = 32


class EloUpdate(NamedTuple):
    winner_rating: int
    loser_rating: int


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties going away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def calculate_win_probability(rating_a: float, rating_b: float) -> float:
    """Calculate the probability of A beating B using the logistic Elo formula."""
    return 1.0 / (1.0 + 10.0 ** ((rating_b - rating_a) / 400.0))


def calculate_elo_update(
    winner_rating: float, loser_rating: float, k_factor: float = DEFAULT_K_FACTOR
) -> EloUpdate:
    """Calculate the new ratings of the winner and the loser of a comparison."""
    expected_winner = calculate_win_probability(winner_rating, loser_rating)
    expected_loser = calculate_win_probability(loser_rating, winner_rating)

    new_winner_rating = winner_rating + k_factor * (1 - expected_winner)
    new_loser_rating = loser_rating + k_factor * (0 - expected_loser)

    return EloUpdate(
        winner_rating=round_half_away_from_zero(new_winner_rating),
        loser_rating=round_half_away_from_zero(new_loser_rating),
    )


def update_notes_after_vote(
    note_a: Note,
    note_b: Note,
    outcome: Outcome,
    k_factor: float = DEFAULT_K_FACTOR,
    *,
    now: datetime | None = None,
) -> tuple[Note, Note]:
    """Apply a comparison outcome to both notes.

    A skip only marks both notes as reviewed. A decisive outcome also updates
    the ratings and the win/loss counters. The input notes are left untouched.

    Returns:
        The updated notes, in the same A/B order as the arguments
    """
    reviewed_at = now or utc_now()

    if outcome == "skip":
        return (
            note_a.model_copy(update={"last_reviewed_at": reviewed_at}),
            note_b.model_copy(update={"last_reviewed_at": reviewed_at}),
        )

    if outcome not in ("A", "B"):
        raise ValueError(f"Unknown comparison outcome: {outcome!r}")

    a_won = outcome == "A"
    winner, loser = (note_a, note_b) if a_won else (note_b, note_a)
    update = calculate_elo_update(winner.rating, loser.rating, k_factor)

    updated_winner = winner.model_copy(
        update={
            "rating": update.winner_rating,
            "wins": winner.wins + 1,
            "last_reviewed_at": reviewed_at,
        }
    )
    updated_loser = loser.model_copy(
        update={
            "rating": update.loser_rating,
            "losses": loser.losses + 1,
            "last_reviewed_at": reviewed_at,
        }
    )

    if a_won:
        return updated_winner, updated_loser
    return updated_loser, updated_winner
