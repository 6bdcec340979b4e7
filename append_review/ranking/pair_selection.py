"""Selection of the next pair of notes to compare."""

from datetime import datetime, timezone
from typing import NamedTuple, Sequence

import numpy as np

from append_review.domain.document import utc_now
from append_review.domain.note import LastPair, Note, NotePair
from append_review.domain.settings import RankingSettings

SECONDS_PER_DAY = 60 * 60 * 24
WINDOW_EXPANSION_STEP = 100


class PriorityScore(NamedTuple):
    note_id: str
    score: float
    recency: float
    low_votes: float
    random: float


def _days_since(timestamp: datetime, now: datetime) -> float:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max((now - timestamp).total_seconds() / SECONDS_PER_DAY, 0.0)


def _recency_score(note: Note, now: datetime, recency_cap_days: float) -> float:
    """1 for notes never reviewed, otherwise the capped staleness in [0, 1]."""
    if note.last_reviewed_at is None:
        return 1.0
    if recency_cap_days <= 0:
        return 1.0
    days = _days_since(note.last_reviewed_at, now)
    return min(days, recency_cap_days) / recency_cap_days


def calculate_priority_scores(
    notes: Sequence[Note],
    settings: RankingSettings,
    *,
    rng: np.random.Generator,
    now: datetime | None = None,
) -> list[PriorityScore]:
    """Score every note by recency, how few votes it has and a random draw.

    Low-vote scores are normalized so they sum to the number of notes. The
    random component is drawn fresh on every call.
    """
    if not notes:
        return []

    now = now or utc_now()
    weights = settings.selection_weights

    recency = np.array([_recency_score(n, now, settings.recency_cap_days) for n in notes])

    raw_low_votes = 1.0 / (1.0 + np.array([n.total_votes for n in notes], dtype=float))
    low_votes_sum = raw_low_votes.sum()
    if low_votes_sum > 0:
        low_votes = raw_low_votes / low_votes_sum * len(notes)
    else:
        low_votes = np.ones(len(notes))

    random = rng.random(len(notes))

    scores = weights.recency * recency + weights.low_votes * low_votes + weights.random * random

    return [
        PriorityScore(
            note_id=note.id,
            score=float(scores[i]),
            recency=float(recency[i]),
            low_votes=float(low_votes[i]),
            random=float(random[i]),
        )
        for i, note in enumerate(notes)
    ]


def weighted_random_selection(
    notes: Sequence[Note],
    scores: dict[str, PriorityScore],
    rng: np.random.Generator,
) -> Note | None:
    """Roulette-wheel selection of a note proportionally to its score.

    Falls back to a uniform pick when the total score is not positive.

    Args:
        notes: Candidate notes
        scores: Priority scores keyed by note id
        rng: Random generator

    Returns:
        The selected note, or None when there are no candidates
    """
    if not notes:
        return None

    weights = [scores[note.id].score if note.id in scores else 0.0 for note in notes]
    total = sum(weights)
    if total <= 0:
        return notes[int(rng.integers(len(notes)))]

    remaining = rng.random() * total
    for note, weight in zip(notes, weights):
        remaining -= weight
        if remaining <= 0:
            return note

    # Floating point leftovers
    return notes[-1]


def _notes_within_window(notes: Sequence[Note], rating: float, window: float) -> list[Note]:
    return [note for note in notes if abs(note.rating - rating) <= window]


def _candidate_window(
    candidates: Sequence[Note], anchor: Note, settings: RankingSettings
) -> list[Note]:
    """Narrow candidates to notes close in rating, widening until enough remain.

    The window grows in steps of 100 until it holds min(min_candidates, len(candidates))
    notes, and never beyond the largest rating distance present.
    """
    window = settings.pair_rating_window
    candidate_set = _notes_within_window(candidates, anchor.rating, window)
    if not candidates:
        return candidate_set

    target = min(settings.min_candidates, len(candidates))
    max_distance = max(abs(note.rating - anchor.rating) for note in candidates)
    while len(candidate_set) < target and window < max_distance:
        window += WINDOW_EXPANSION_STEP
        candidate_set = _notes_within_window(candidates, anchor.rating, window)

    return candidate_set


def select_note_pair(
    notes: Sequence[Note],
    settings: RankingSettings,
    exclude_pair: LastPair | None = None,
    *,
    rng: np.random.Generator | None = None,
    now: datetime | None = None,
) -> NotePair | None:
    """Choose the next two active notes to compare.

    Note A is drawn by priority from all notes. If it belongs to the excluded
    pair one re-roll is made among the remaining notes; a second collision is
    accepted. Note B is drawn from the notes close in rating to A, excluding A
    and the excluded pair.

    Args:
        notes: Active notes
        settings: Ranking settings
        exclude_pair: Previously shown pair to steer away from
        rng: Random generator, a fresh unseeded one when omitted
        now: Reference time for recency scores

    Returns:
        The pair to compare, or None when no pair can be formed
    """
    if len(notes) < 2:
        return None

    rng = rng if rng is not None else np.random.default_rng()
    scores = {
        score.note_id: score
        for score in calculate_priority_scores(notes, settings, rng=rng, now=now)
    }

    note_a = weighted_random_selection(notes, scores, rng)
    if note_a is None:
        return None

    if exclude_pair is not None and exclude_pair.contains(note_a.id):
        available = [note for note in notes if not exclude_pair.contains(note.id)]
        if len(available) >= 2:
            alternative = weighted_random_selection(available, scores, rng)
            if alternative is not None:
                note_a = alternative

    candidates = [note for note in notes if note.id != note_a.id]
    if exclude_pair is not None:
        candidates = [note for note in candidates if not exclude_pair.contains(note.id)]

    candidate_set = _candidate_window(candidates, note_a, settings)
    if not candidate_set:
        return None

    note_b = weighted_random_selection(candidate_set, scores, rng)
    if note_b is None:
        return None

    return NotePair(note_a=note_a, note_b=note_b)
