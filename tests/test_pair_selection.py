from datetime import datetime, timedelta, timezone
from typing import Callable

import numpy as np
import pytest

from append_review.domain.note import LastPair, Note
from append_review.domain.settings import RankingSettings, SelectionWeights
from append_review.ranking.pair_selection import (
    PriorityScore,
    calculate_priority_scores,
    select_note_pair,
    weighted_random_selection,
)

NOW = datetime(2024, 6, 15, tzinfo=timezone.utc)


def _score(note_id: str, score: float) -> PriorityScore:
    return PriorityScore(note_id=note_id, score=score, recency=0, low_votes=0, random=0)


def test_priority_recency_component(make_note: Callable[..., Note], rng: np.random.Generator):
    """Test recency is 1 for unreviewed notes and the capped staleness otherwise."""
    notes = [
        make_note("never"),
        make_note("week", last_reviewed_at=NOW - timedelta(days=7)),
        make_note("month", last_reviewed_at=NOW - timedelta(days=30)),
        make_note("future", last_reviewed_at=NOW + timedelta(days=1)),
    ]
    settings = RankingSettings(recency_cap_days=14)

    scores = calculate_priority_scores(notes, settings, rng=rng, now=NOW)

    assert [s.recency for s in scores] == pytest.approx([1.0, 0.5, 1.0, 0.0])


def test_priority_low_votes_normalized(make_note: Callable[..., Note], rng: np.random.Generator):
    """Test low-vote scores favour notes with fewer votes and sum to the number of notes."""
    notes = [make_note("fresh"), make_note("some", wins=1), make_note("many", wins=5, losses=4)]

    scores = calculate_priority_scores(notes, RankingSettings(), rng=rng, now=NOW)
    low_votes = [s.low_votes for s in scores]

    assert sum(low_votes) == pytest.approx(3.0)
    assert low_votes[0] > low_votes[1] > low_votes[2]
    assert low_votes[0] / low_votes[1] == pytest.approx(2.0)


def test_priority_combines_weights(make_note: Callable[..., Note], rng: np.random.Generator):
    """Test the combined score is the weighted sum of its components."""
    notes = [make_note("a"), make_note("b", wins=3, last_reviewed_at=NOW - timedelta(days=2))]
    settings = RankingSettings(
        recency_cap_days=4, selection_weights=SelectionWeights(recency=2, low_votes=1, random=3)
    )

    scores = calculate_priority_scores(notes, settings, rng=rng, now=NOW)

    for s in scores:
        assert 0 <= s.random < 1
        assert s.score == pytest.approx(2 * s.recency + 1 * s.low_votes + 3 * s.random)
    assert scores[1].recency == pytest.approx(0.5)


def test_priority_random_drawn_every_call(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    notes = [make_note("a"), make_note("b")]

    first = calculate_priority_scores(notes, RankingSettings(), rng=rng, now=NOW)
    second = calculate_priority_scores(notes, RankingSettings(), rng=rng, now=NOW)

    assert [s.random for s in first] != [s.random for s in second]


def test_priority_scores_empty(rng: np.random.Generator) -> None:
    assert calculate_priority_scores([], RankingSettings(), rng=rng) == []


def test_weighted_selection_empty(rng: np.random.Generator) -> None:
    assert weighted_random_selection([], {}, rng) is None


def test_weighted_selection_follows_scores(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    """Test that only notes with a positive score are picked."""
    notes = [make_note("heavy"), make_note("zero"), make_note("none")]
    scores = {"heavy": _score("heavy", 5.0), "zero": _score("zero", 0.0)}

    picks = {weighted_random_selection(notes, scores, rng).id for _ in range(100)}

    assert picks == {"heavy"}


def test_weighted_selection_proportions(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    notes = [make_note("a"), make_note("b")]
    scores = {"a": _score("a", 3.0), "b": _score("b", 1.0)}

    picks = [weighted_random_selection(notes, scores, rng).id for _ in range(4000)]

    assert picks.count("a") / len(picks) == pytest.approx(0.75, abs=0.05)


def test_weighted_selection_uniform_fallback(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    """Test that a non-positive total score falls back to a uniform pick."""
    notes = [make_note("a"), make_note("b"), make_note("c")]
    scores = {note.id: _score(note.id, 0.0) for note in notes}

    picks = {weighted_random_selection(notes, scores, rng).id for _ in range(200)}

    assert picks == {"a", "b", "c"}


def test_select_requires_two_notes(make_note: Callable[..., Note], rng: np.random.Generator):
    assert select_note_pair([], RankingSettings(), rng=rng) is None
    assert select_note_pair([make_note("a")], RankingSettings(), rng=rng) is None


def test_select_two_notes(make_note: Callable[..., Note], rng: np.random.Generator) -> None:
    notes = [make_note("a"), make_note("b")]

    pair = select_note_pair(notes, RankingSettings(), rng=rng)

    assert pair is not None
    assert {pair.note_a.id, pair.note_b.id} == {"a", "b"}


def test_select_never_pairs_note_with_itself(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    notes = [make_note(f"n{i}", rating=900 + 50 * i) for i in range(6)]

    for _ in range(300):
        pair = select_note_pair(notes, RankingSettings(), rng=rng)
        assert pair is not None
        assert pair.note_a.id != pair.note_b.id


def test_select_avoids_excluded_pair(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    """Test that with four or more notes the previous pair is not shown again."""
    notes = [make_note(f"n{i}") for i in range(1, 6)]
    exclude = LastPair(note_a_id="n1", note_b_id="n2")

    for _ in range(300):
        pair = select_note_pair(notes, RankingSettings(), exclude, rng=rng)
        assert pair is not None
        assert not exclude.contains(pair.note_a.id)
        assert not exclude.contains(pair.note_b.id)


def test_select_accepts_second_collision_with_few_notes(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    """Test that with three notes no re-roll is possible and B avoids the excluded pair."""
    notes = [make_note("n1"), make_note("n2"), make_note("n3")]
    exclude = LastPair(note_a_id="n1", note_b_id="n2")

    results = [select_note_pair(notes, RankingSettings(), exclude, rng=rng) for _ in range(300)]
    pairs = [pair for pair in results if pair is not None]

    assert pairs
    assert any(pair is None for pair in results)
    for pair in pairs:
        assert pair.note_b.id == "n3"
        assert pair.note_a.id in {"n1", "n2"}


def test_select_prefers_close_ratings(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    """Test that the rating window keeps distant notes apart when closer ones exist."""
    notes = [
        make_note("low", rating=1000),
        make_note("mid", rating=1100),
        make_note("high", rating=2000),
    ]
    settings = RankingSettings(pair_rating_window=200, min_candidates=1)

    pairs = [select_note_pair(notes, settings, rng=rng) for _ in range(300)]

    assert all(pair is not None for pair in pairs)
    assert all({pair.note_a.id, pair.note_b.id} != {"low", "high"} for pair in pairs)


def test_select_expands_window_for_isolated_note(
    make_note: Callable[..., Note], rng: np.random.Generator
) -> None:
    """Test that the window widens until a far away note finds a partner."""
    notes = [make_note("a", rating=1000), make_note("b", rating=5000)]
    settings = RankingSettings(pair_rating_window=0, min_candidates=50)

    pair = select_note_pair(notes, settings, rng=rng)

    assert pair is not None
    assert {pair.note_a.id, pair.note_b.id} == {"a", "b"}


def test_select_is_reproducible_with_seed(make_note: Callable[..., Note]) -> None:
    notes = [make_note(f"n{i}") for i in range(8)]

    first = select_note_pair(notes, RankingSettings(), rng=np.random.default_rng(7), now=NOW)
    second = select_note_pair(notes, RankingSettings(), rng=np.random.default_rng(7), now=NOW)

    assert first == second
