"""The persisted application document."""

from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from append_review.domain.note import CamelModel, Note
from append_review.domain.settings import RankingSettings

DOCUMENT_VERSION = 1


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AppData(CamelModel):
    """Single JSON document holding all notes, the markdown source and settings."""

    version: int = DOCUMENT_VERSION
    created_at: datetime = Field(default_factory=utc_now)
    markdown_content: str = ""
    notes: list[Note] = []
    archived_notes: list[Note] = []
    settings: RankingSettings = Field(default_factory=RankingSettings)

    @classmethod
    def from_json_dict(cls, data: dict[str, Any]) -> "AppData":
        """Validate a raw document, filling in fields added after version 1 shipped."""
        if data.get("archivedNotes") is None and data.get("archived_notes") is None:
            data = {**data, "archivedNotes": []}
        return cls.model_validate(data)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def find_note(self, note_id: str) -> Note | None:
        """Find a note by id among active and archived notes."""
        for note in self.notes + self.archived_notes:
            if note.id == note_id:
                return note
        return None
