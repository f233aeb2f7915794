"""Static knowledge text shared by every request."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

KnowledgeSource = Literal["file", "fallback"]

DEFAULT_ENCODING = "utf-8"


class KnowledgeStore:
    """Loads the knowledge blob from disk, or a fallback when it is missing.

    The text is read-only between loads.  ``reload`` re-runs the same
    load-or-fallback logic and swaps the whole string in one assignment.
    """

    def __init__(self, path: str | Path, fallback: str) -> None:
        self._path = Path(path)
        self._fallback = fallback
        self._text = ""
        self._source: KnowledgeSource = "fallback"
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def text(self) -> str:
        return self._text

    @property
    def length(self) -> int:
        return len(self._text)

    @property
    def source(self) -> KnowledgeSource:
        return self._source

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> str:
        """Read the knowledge file, falling back to the built-in text."""
        if self._path.is_file():
            self._text = self._path.read_text(encoding=DEFAULT_ENCODING)
            self._source = "file"
            logger.info(
                "Loaded knowledge from %s (%d chars)", self._path, len(self._text)
            )
        else:
            self._text = self._fallback
            self._source = "fallback"
            logger.warning(
                "Knowledge file %s not found, using fallback text (%d chars)",
                self._path,
                len(self._text),
            )
        self._loaded = True
        return self._text

    def reload(self) -> int:
        """Reload from disk and return the new length."""
        self.load()
        return self.length
