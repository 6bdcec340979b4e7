import json
from pathlib import Path
from typing import Any, Sequence

from loguru import logger
from pydantic import BaseModel

from append_review.domain.document import AppData, utc_now
from append_review.domain.note import Note
from append_review.domain.settings import RankingSettings, SelectionWeights
from append_review.ingestion.markdown_parser import MarkdownNoteExtractor
from append_review.stores.base import NoteStore


def _field_updates(model_cls: type[BaseModel], updates: dict[str, Any]) -> dict[str, Any]:
    """Map update keys given as field names or wire aliases to field names."""
    names_by_key = {}
    for name, field in model_cls.model_fields.items():
        names_by_key[name] = name
        if field.alias:
            names_by_key[field.alias] = name

    normalized = {}
    for key, value in updates.items():
        if key not in names_by_key:
            raise ValueError(f"Unknown {model_cls.__name__} field: {key}")
        normalized[names_by_key[key]] = value
    return normalized


class LocalNoteStore(NoteStore):
    """Local store that keeps the whole document in a single JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalNoteStore.

        Args:
            filepath: Path to the document file. If provided and exists, will auto-load.
                     If provided and doesn't exist, a default document is written there.
                     If not provided, the document lives in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._extractor = MarkdownNoteExtractor()

        if self._filepath and Path(self._filepath).exists():
            self._data = self._load(self._filepath)
        else:
            self._data = AppData()
            self._persist()

    @classmethod
    def from_data(cls, data: AppData) -> "LocalNoteStore":
        """Create an in-memory LocalNoteStore around an existing document (useful for testing)."""
        instance = cls(filepath=None)
        instance._data = data.model_copy(deep=True)
        return instance

    def _load(self, filepath: str) -> AppData:
        """Read the document, falling back to a fresh default document if it is unusable."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError("Document root must be a JSON object")
            data = AppData.from_json_dict(raw)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load document from {filepath}, starting fresh: {e}")
            self._data = AppData()
            self._persist()
            return self._data

        logger.info(
            f"Loaded document from {filepath}: {len(data.notes)} active notes, "
            f"{len(data.archived_notes)} archived"
        )
        return data

    def _persist(self) -> None:
        if self._filepath:
            self.save()

    def save(self, filepath: str | None = None) -> None:
        """Save the document to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, "w", encoding="utf-8") as f:
            json.dump(self._data.to_json_dict(), f)

    def get_snapshot(self) -> AppData:
        return self._data.model_copy(deep=True)

    def set_notes(self, notes: Sequence[Note]) -> None:
        self._data.notes = list(notes)
        self._persist()

    def update_note(self, note_id: str, **updates: Any) -> None:
        fields = _field_updates(Note, updates)
        fields.pop("id", None)
        for i, note in enumerate(self._data.notes):
            if note.id == note_id:
                self._data.notes[i] = Note.model_validate({**note.model_dump(), **fields})
                self._persist()
                return
        logger.debug(f"Ignoring update for unknown note {note_id}")

    def update_markdown_content(self, content: str) -> None:
        self._data.markdown_content = content
        self._persist()

    def update_settings(self, **updates: Any) -> None:
        fields = _field_updates(RankingSettings, updates)
        current = self._data.settings.model_dump()
        weights = fields.get("selection_weights")
        if isinstance(weights, dict):
            fields["selection_weights"] = {
                **current["selection_weights"],
                **_field_updates(SelectionWeights, weights),
            }
        self._data.settings = RankingSettings.model_validate({**current, **fields})
        self._persist()

    def reset_rankings(self) -> None:
        reset = {
            "rating": self._data.settings.initial_rating,
            "wins": 0,
            "losses": 0,
            "last_reviewed_at": None,
        }
        self._data.notes = [note.model_copy(update=reset) for note in self._data.notes]
        self._data.archived_notes = [
            note.model_copy(update=reset) for note in self._data.archived_notes
        ]
        logger.info("Reset rankings of all notes")
        self._persist()

    def archive_note(self, note_id: str) -> None:
        for i, note in enumerate(self._data.notes):
            if note.id == note_id:
                break
        else:
            logger.debug(f"Cannot archive unknown note {note_id}")
            return

        del self._data.notes[i]
        self._data.archived_notes.insert(0, note.model_copy(update={"archived_at": utc_now()}))
        self._remove_text_from_markdown(note.text)
        self._persist()

    def unarchive_note(self, note_id: str) -> None:
        for i, note in enumerate(self._data.archived_notes):
            if note.id == note_id:
                break
        else:
            logger.debug(f"Cannot unarchive unknown note {note_id}")
            return

        del self._data.archived_notes[i]
        restored = note.model_copy(update={"archived_at": None})

        # The text may have been typed in again while the note was archived
        for j, active in enumerate(self._data.notes):
            if active.text == restored.text:
                self._data.notes[j] = restored
                break
        else:
            self._data.notes.append(restored)
            self._append_text_to_markdown(restored.text)
        self._persist()

    def clear_all_data(self) -> None:
        self._data = AppData()
        logger.info("Cleared all data")
        self._persist()

    def _remove_text_from_markdown(self, text: str) -> None:
        if not self._data.markdown_content:
            return
        self._data.markdown_content = self._extractor.remove_text(
            self._data.markdown_content, text
        )

    def _append_text_to_markdown(self, text: str) -> None:
        if self._data.markdown_content.strip():
            self._data.markdown_content += "\n\n" + text
        else:
            self._data.markdown_content = text
