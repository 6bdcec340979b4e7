import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator

import numpy as np
import pytest
from fastapi.testclient import TestClient

from append_review.api import create_app
from append_review.domain.document import AppData
from append_review.domain.note import Note
from append_review.session import ReviewSession
from append_review.stores.local import LocalNoteStore

CREATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)

SAMPLE_MARKDOWN = """---
title: Ideas
---

# Ideas

Ship the smallest useful thing first.

- Write tests
- Review them

<!-- draft thoughts -->

```python
print("keep me together")
```

---

Talk to users every week."""


@pytest.fixture
def make_note() -> Callable[..., Note]:
    def _make_note(note_id: str, text: str | None = None, **fields) -> Note:
        values = {
            "id": note_id,
            "text": text or f"Text of {note_id}",
            "rating": 1000,
            "wins": 0,
            "losses": 0,
            "last_reviewed_at": None,
            "created_at": CREATED_AT,
        }
        values.update(fields)
        return Note(**values)

    return _make_note


@pytest.fixture
def test_notes(make_note: Callable[..., Note]) -> list[Note]:
    return [make_note(f"note{i}", f"Note number {i}.") for i in range(1, 5)]


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def store(test_notes: list[Note]) -> LocalNoteStore:
    markdown = "\n\n".join(note.text for note in test_notes)
    return LocalNoteStore.from_data(AppData(markdown_content=markdown, notes=test_notes))


@pytest.fixture
def empty_store() -> LocalNoteStore:
    return LocalNoteStore()


@pytest.fixture
def session(store: LocalNoteStore, rng: np.random.Generator) -> ReviewSession:
    return ReviewSession(store, rng=rng)


@pytest.fixture
def test_client(store: LocalNoteStore, rng: np.random.Generator) -> TestClient:
    """Create test client around an in-memory store."""
    return TestClient(create_app(store=store, rng=rng))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sample_markdown() -> str:
    return SAMPLE_MARKDOWN
