"""Note domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Note(CamelModel):
    """Represents a single comparable note extracted from the markdown source.

    Attributes:
        id: Unique identifier (UUID4 string), stable across edits of other notes
        text: Extracted block of markdown, also used as the merge key
        rating: Elo rating
        wins: Number of decisive comparisons won
        losses: Number of decisive comparisons lost
        last_reviewed_at: Time of the last comparison (including skips) showing this note
        created_at: Creation time
        archived_at: Time the note was archived, None for active notes
    """

    id: str
    text: str
    rating: int
    wins: int = 0
    losses: int = 0
    last_reviewed_at: datetime | None = None
    created_at: datetime
    archived_at: datetime | None = None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    @property
    def total_votes(self) -> int:
        return self.wins + self.losses


class NotePair(CamelModel):
    """Two active notes proposed for comparison."""

    note_a: Note
    note_b: Note


class LastPair(CamelModel):
    """Ids of the most recently shown pair, used to avoid immediate repeats."""

    note_a_id: str
    note_b_id: str

    @classmethod
    def from_pair(cls, pair: NotePair) -> "LastPair":
        return cls(note_a_id=pair.note_a.id, note_b_id=pair.note_b.id)

    def contains(self, note_id: str) -> bool:
        return note_id in (self.note_a_id, self.note_b_id)
