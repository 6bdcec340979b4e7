from typing import Any, Protocol, Sequence

from append_review.domain.document import AppData
from append_review.domain.note import Note


class NoteStore(Protocol):
    """Protocol for storage of the application document."""

    def get_snapshot(self) -> AppData:
        """Get a copy of the current document."""
        ...

    def set_notes(self, notes: Sequence[Note]) -> None:
        """Replace the active notes."""
        ...

    def update_note(self, note_id: str, **updates: Any) -> None:
        """Update fields of an active note. Unknown ids are ignored."""
        ...

    def update_markdown_content(self, content: str) -> None:
        """Replace the markdown source."""
        ...

    def update_settings(self, **updates: Any) -> None:
        """Update some of the ranking settings."""
        ...

    def reset_rankings(self) -> None:
        """Reset rating, wins, losses and review time of active and archived notes."""
        ...

    def archive_note(self, note_id: str) -> None:
        """Archive an active note and remove its text from the markdown source."""
        ...

    def unarchive_note(self, note_id: str) -> None:
        """Restore an archived note and append its text to the markdown source."""
        ...

    def clear_all_data(self) -> None:
        """Replace the document with an empty default document."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the document to disk."""
        ...
