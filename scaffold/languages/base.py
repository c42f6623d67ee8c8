"""Abstract base for language parsers."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from scaffold.models import ParsedFile

logger = logging.getLogger(__name__)


class LanguageParser(ABC):
    """Abstract interface for language-specific import/export parsers.

    Every language parser must:
    1. Declare which files it can handle (by extension)
    2. Extract import/export facts from source text
    """

    @abstractmethod
    def can_handle(self, file_path: str) -> bool:
        """Return True if this parser can process the given file."""
        ...

    @abstractmethod
    def parse(self, source: str, file_path: str) -> ParsedFile:
        """Extract import/export facts from source text.

        Must tolerate syntax it does not understand and must not raise on
        malformed input: unrecognized regions simply contribute no facts.
        """
        ...

    @property
    @abstractmethod
    def language_id(self) -> str:
        """Return a unique language identifier (e.g., 'typescript')."""
        ...

    @property
    def supported_extensions(self) -> List[str]:
        """Return list of file extensions this parser handles."""
        return []

    def parse_file(self, file_path: str) -> Optional[ParsedFile]:
        """Read a UTF-8 file from disk and parse it.

        Returns None when the file cannot be read or decoded.
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to parse %s: %s", file_path, exc)
            return None
        return self.parse(source, file_path)
