"""Language parser registry and factory."""

from typing import Dict, List, Optional

from scaffold.languages.base import LanguageParser
from scaffold.languages.resolver import ModuleResolver


class ParserRegistry:
    """Registry for language parsers.

    Usage:
        registry = ParserRegistry()
        registry.register(TypeScriptParser(resolver))
        parser = registry.get_parser("src/App.tsx")
    """

    def __init__(self) -> None:
        self._parsers: List[LanguageParser] = []
        self._extension_cache: Dict[str, LanguageParser] = {}

    def register(self, parser: LanguageParser) -> None:
        """Register a language parser."""
        self._parsers.append(parser)
        for ext in parser.supported_extensions:
            self._extension_cache[ext] = parser

    def get_parser(self, file_path: str) -> Optional[LanguageParser]:
        """Find the parser for a file: extension cache first, then can_handle."""
        for ext, parser in self._extension_cache.items():
            if file_path.endswith(ext):
                return parser

        for parser in self._parsers:
            if parser.can_handle(file_path):
                return parser

        return None

    @property
    def supported_languages(self) -> List[str]:
        return [p.language_id for p in self._parsers]

    @property
    def supported_extensions(self) -> List[str]:
        return list(self._extension_cache)

    def can_handle(self, file_path: str) -> bool:
        return self.get_parser(file_path) is not None


def create_default_registry(resolver: Optional[ModuleResolver] = None) -> ParserRegistry:
    """Create a registry with the built-in parsers sharing one resolver."""
    from scaffold.languages.typescript import TypeScriptParser

    registry = ParserRegistry()
    registry.register(TypeScriptParser(resolver))
    return registry
