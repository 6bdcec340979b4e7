"""CLI for importing a markdown file into the local append review document"""

import argparse
import sys
from pathlib import Path

from loguru import logger

from append_review.config import settings
from append_review.session import ReviewSession
from append_review.stores.local import LocalNoteStore


def main(in_file: str, local_outfile_store: str, append: bool) -> None:
    markdown = Path(in_file).read_text(encoding="utf-8")
    store = LocalNoteStore(filepath=local_outfile_store)
    session = ReviewSession(store)

    if append:
        current = store.get_snapshot().markdown_content
        if current.strip():
            markdown = f"{current}\n\n{markdown}"

    store.update_markdown_content(markdown)
    notes = session.parse_and_apply()

    new_notes = [note for note in notes if note.wins + note.losses == 0]
    logger.info(f"Imported {in_file}:")
    logger.info(f"  - Active notes: {len(notes)}")
    logger.info(f"  - Without votes: {len(new_notes)}")
    logger.info(f"  - Archived notes: {len(session.archived_notes)}")


if __name__ == "__main__":
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    parser = argparse.ArgumentParser()
    parser.add_argument("--in-file", type=str, required=True, help="Markdown file to import")
    parser.add_argument(
        "--outfile-store",
        type=str,
        required=False,
        help="Local document file",
        default=settings.local_store_path,
    )
    parser.add_argument(
        "--append",
        action="store_true",
        help="Append to the existing markdown instead of replacing it",
    )

    args = parser.parse_args()

    main(
        in_file=args.in_file,
        local_outfile_store=args.outfile_store,
        append=args.append,
    )
