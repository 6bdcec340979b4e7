"""Review session tying the note store to the ranking engine."""

import re
from typing import Any

import numpy as np
from loguru import logger

from append_review.domain.note import LastPair, Note, NotePair
from append_review.ingestion.markdown_parser import MarkdownNoteExtractor
from append_review.ingestion.reconciler import reconcile_notes
from append_review.ranking.elo import Outcome, update_notes_after_vote
from append_review.ranking.pair_selection import select_note_pair
from append_review.stores.base import NoteStore

BLANK_LINE_PATTERN = re.compile(r"\n\s*\n")


def _count_paragraphs(content: str) -> int:
    return sum(1 for block in BLANK_LINE_PATTERN.split(content) if block.strip())


class ReviewSession:
    """Drives a pairwise review over the notes of a store.

    The session owns the pair currently on screen and the last pair shown.
    Every mutation of the active notes is followed by a fresh selection made
    from the latest snapshot.
    """

    def __init__(self, store: NoteStore, *, rng: np.random.Generator | None = None) -> None:
        """Initialize the review session.

        Args:
            store: Store holding the document
            rng: Random generator used for pair selection
        """
        self.store = store
        self.rng = rng if rng is not None else np.random.default_rng()
        self.extractor = MarkdownNoteExtractor()
        self.current_pair: NotePair | None = None
        self.last_pair: LastPair | None = None

    @property
    def active_notes(self) -> list[Note]:
        return [note for note in self.store.get_snapshot().notes if note.archived_at is None]

    @property
    def archived_notes(self) -> list[Note]:
        return self.store.get_snapshot().archived_notes

    @property
    def can_review(self) -> bool:
        return len(self.active_notes) >= 2

    def update_markdown(self, content: str) -> None:
        """Store new markdown, parsing it right away when paragraphs were added."""
        previous = self.store.get_snapshot().markdown_content
        self.store.update_markdown_content(content)

        if _count_paragraphs(content) > _count_paragraphs(previous):
            self.parse_and_apply()

    def parse_and_apply(self) -> list[Note]:
        """Rebuild the active notes from the markdown source."""
        data = self.store.get_snapshot()
        candidates = self.extractor.extract(data.markdown_content)
        active = [note for note in data.notes if note.archived_at is None]
        notes = reconcile_notes(candidates, active, data.settings.initial_rating)
        self.store.set_notes(notes)

        logger.info(f"Parsed {len(candidates)} notes from markdown ({len(active)} before)")

        if self.current_pair is not None and not self._pair_is_active(self.current_pair, notes):
            self.current_pair = None
        if self.current_pair is None and len(notes) >= 2:
            self.generate_pair()
        return notes

    def generate_pair(self) -> NotePair | None:
        """Select a new pair to compare, steering away from the last pair shown."""
        data = self.store.get_snapshot()
        active = [note for note in data.notes if note.archived_at is None]

        pair = select_note_pair(active, data.settings, self.last_pair, rng=self.rng)
        if pair is None and self.last_pair is not None:
            # Too few notes outside the last pair, allow a repeat rather than stalling
            pair = select_note_pair(active, data.settings, rng=self.rng)

        self.current_pair = pair
        return pair

    def submit_vote(self, outcome: Outcome) -> NotePair | None:
        """Record the outcome for the current pair and move on to the next one.

        Returns:
            The next pair, or None when there was no pair to vote on or none is left
        """
        if self.current_pair is None:
            return None

        pair = self.current_pair
        self.last_pair = LastPair.from_pair(pair)

        data = self.store.get_snapshot()
        active_by_id = {note.id: note for note in data.notes}
        note_a = active_by_id.get(pair.note_a.id)
        note_b = active_by_id.get(pair.note_b.id)
        if note_a is None or note_b is None:
            logger.warning("Current pair is no longer active, selecting a new one")
            return self.generate_pair()

        updated_a, updated_b = update_notes_after_vote(
            note_a, note_b, outcome, data.settings.k_factor
        )
        for note in (updated_a, updated_b):
            self.store.update_note(
                note.id,
                rating=note.rating,
                wins=note.wins,
                losses=note.losses,
                last_reviewed_at=note.last_reviewed_at,
            )

        logger.debug(
            f"Vote {outcome}: {updated_a.id} -> {updated_a.rating}, "
            f"{updated_b.id} -> {updated_b.rating}"
        )
        return self.generate_pair()

    def archive_note(self, note_id: str) -> None:
        self.store.archive_note(note_id)

        if self.current_pair is not None and note_id in (
            self.current_pair.note_a.id,
            self.current_pair.note_b.id,
        ):
            self.current_pair = None
            self.last_pair = None

        if self.can_review:
            self.generate_pair()
        else:
            self.current_pair = None

    def unarchive_note(self, note_id: str) -> None:
        self.store.unarchive_note(note_id)
        if self.current_pair is None and self.can_review:
            self.generate_pair()

    def update_settings(self, **updates: Any) -> None:
        self.store.update_settings(**updates)

    def reset_rankings(self) -> None:
        self.store.reset_rankings()
        self.current_pair = None
        self.last_pair = None

    def clear_all_data(self) -> None:
        self.store.clear_all_data()
        self.current_pair = None
        self.last_pair = None

    @staticmethod
    def _pair_is_active(pair: NotePair, notes: list[Note]) -> bool:
        active_ids = {note.id for note in notes}
        return pair.note_a.id in active_ids and pair.note_b.id in active_ids
