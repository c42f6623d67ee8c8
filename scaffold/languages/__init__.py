"""Source parsers and module resolution."""

from scaffold.languages.base import LanguageParser
from scaffold.languages.registry import ParserRegistry, create_default_registry
from scaffold.languages.resolver import ModuleResolver

__all__ = [
    "LanguageParser",
    "ModuleResolver",
    "ParserRegistry",
    "create_default_registry",
]
