"""Block-level extraction of note texts from markdown content."""

import re

FRONT_MATTER_PATTERN = re.compile(r"\A---\s*\n.*?\n---\s*\n", flags=re.DOTALL)
HTML_COMMENT_PATTERN = re.compile(r"<!--.*?-->", flags=re.DOTALL)
BLANK_LINE_PATTERN = re.compile(r"\n\s*\n")
HEADING_PATTERN = re.compile(r"#{1,6}\s")
HORIZONTAL_RULE_PATTERN = re.compile(r"(-{3,}|_{3,}|\*{3,})\s*")
FENCE_PATTERN = re.compile(r"```|~~~")
LIST_ITEM_PATTERN = re.compile(r"\s*[-*+]\s|\s*\d+\.\s")


class MarkdownNoteExtractor:
    """Service for splitting markdown into candidate note texts.

    Notes are separated by blank lines. Headings and horizontal rules only give
    the document structure and never become notes, fenced code blocks and list
    clusters are kept together as a single note.
    """

    def extract(self, markdown: str) -> list[str]:
        """Extract candidate note texts from markdown.

        Args:
            markdown: Raw markdown content

        Returns:
            Deduplicated note texts in document order
        """
        if not markdown.strip():
            return []

        content = self._strip_front_matter(markdown)
        content = HTML_COMMENT_PATTERN.sub("", content)

        texts = []
        for block in BLANK_LINE_PATTERN.split(content):
            texts.extend(self._texts_from_block(block))

        return self._deduplicate(texts)

    def remove_text(self, markdown: str, text: str) -> str:
        """Remove the blocks of the markdown that extract to the given note text.

        Blocks are compared by the texts they yield, after comment removal, so
        inline comments or a preceding front matter block do not hide a match.
        The front matter itself is kept.
        """
        front_matter = ""
        match = FRONT_MATTER_PATTERN.match(markdown)
        if match:
            front_matter = match.group(0)
            markdown = markdown[match.end() :]

        target = text.strip()
        kept = []
        for block in BLANK_LINE_PATTERN.split(markdown):
            if not block.strip():
                continue
            if target in self._texts_from_block(HTML_COMMENT_PATTERN.sub("", block)):
                continue
            kept.append(block)
        return front_matter + "\n\n".join(kept)

    @staticmethod
    def _strip_front_matter(markdown: str) -> str:
        """Remove a leading YAML front matter block."""
        return FRONT_MATTER_PATTERN.sub("", markdown, count=1)

    @staticmethod
    def _texts_from_block(block: str) -> list[str]:
        """Turn a single blank-line separated block into zero or more note texts."""
        trimmed = block.strip()
        if not trimmed:
            return []

        if HEADING_PATTERN.match(trimmed):
            return []

        if HORIZONTAL_RULE_PATTERN.fullmatch(trimmed):
            return []

        if FENCE_PATTERN.match(trimmed):
            return [trimmed]

        if LIST_ITEM_PATTERN.match(trimmed):
            parts = BLANK_LINE_PATTERN.split(trimmed)
            return [part.strip() for part in parts if part.strip()]

        return [trimmed]

    @staticmethod
    def _deduplicate(texts: list[str]) -> list[str]:
        """Drop repeated texts, keeping the first occurrence."""
        seen = set()
        unique = []
        for text in texts:
            if text in seen:
                continue
            seen.add(text)
            unique.append(text)
        return unique


def extract_note_texts(markdown: str) -> list[str]:
    """Extract candidate note texts from markdown with the default extractor."""
    return MarkdownNoteExtractor().extract(markdown)
