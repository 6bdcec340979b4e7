"""Merging of extracted note texts with the notes already known to the store."""

import uuid
from datetime import datetime
from typing import Callable, Sequence

from append_review.domain.document import utc_now
from append_review.domain.note import Note


def generate_note_id() -> str:
    return str(uuid.uuid4())


def reconcile_notes(
    candidates: Sequence[str],
    existing_notes: Sequence[Note],
    initial_rating: int,
    *,
    now: datetime | None = None,
    id_factory: Callable[[], str] = generate_note_id,
) -> list[Note]:
    """Build the new active note list from extracted texts.

    Notes whose text is unchanged are reused as they are, keeping their id and
    statistics. Unknown texts become fresh notes. Existing notes whose text is
    no longer among the candidates are dropped.

    Args:
        candidates: Extracted note texts, in document order
        existing_notes: Currently active notes
        initial_rating: Rating given to new notes
        now: Creation time for new notes, defaults to the current UTC time
        id_factory: Callable producing unique ids for new notes

    Returns:
        Notes in candidate order
    """
    created_at = now or utc_now()
    existing_by_text = {note.text: note for note in existing_notes}

    merged = []
    for text in candidates:
        existing = existing_by_text.get(text)
        if existing is not None:
            merged.append(existing)
            continue

        merged.append(
            Note(
                id=id_factory(),
                text=text,
                rating=initial_rating,
                wins=0,
                losses=0,
                last_reviewed_at=None,
                created_at=created_at,
            )
        )

    return merged
