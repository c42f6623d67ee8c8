"""Module resolution: import specifier -> FileIdentity."""

import logging
import os
import re
from typing import List, Optional, Tuple

from scaffold.config import ResolverConfig
from scaffold.models import RESOLVE_EXTENSIONS, canonical_path

logger = logging.getLogger(__name__)


def _compile_alias(pattern: str) -> re.Pattern:
    """'@/*' -> ^@/(.*)$ ; patterns without '*' match exactly."""
    if "*" not in pattern:
        return re.compile("^" + re.escape(pattern) + "$")
    prefix, suffix = pattern.split("*", 1)
    return re.compile("^" + re.escape(prefix) + "(.*)" + re.escape(suffix) + "$")


class ModuleResolver:
    """Resolve local specifiers to files on disk.

    Strategy order:
    1. './' or '../' -> relative to the importer's directory
    2. tsconfig path aliases, in declaration order
    3. baseUrl fallback

    Bare package specifiers never reach the resolver; only specifiers
    starting with '.' or '/' are resolved.

    File probing from a candidate base path, first regular file wins:
    exact path -> path + ext (RESOLVE_EXTENSIONS order) -> path/index + ext.
    """

    def __init__(self, config: Optional[ResolverConfig] = None,
                 extensions: Tuple[str, ...] = RESOLVE_EXTENSIONS) -> None:
        self.config = config or ResolverConfig()
        self.extensions = extensions
        self._aliases: List[Tuple[re.Pattern, List[str]]] = [
            (_compile_alias(pattern), targets)
            for pattern, targets in self.config.paths.items()
        ]

    def resolve(self, source: str, importer_path: str) -> Optional[str]:
        """Return the FileIdentity a specifier points at, or None."""
        if source.startswith("."):
            importer_dir = os.path.dirname(importer_path)
            resolved = self.resolve_file(os.path.join(importer_dir, source))
        else:
            resolved = self._resolve_non_relative(source)
        if resolved is None:
            logger.debug("Unresolved import %r in %s", source, importer_path)
        return resolved

    def _resolve_non_relative(self, source: str) -> Optional[str]:
        if self._aliases and self.config.paths_base:
            resolved = self._resolve_alias(source)
            if resolved:
                return resolved

        if self.config.base_url:
            return self.resolve_file(os.path.join(self.config.base_url, source))
        return None

    def _resolve_alias(self, source: str) -> Optional[str]:
        for regex, targets in self._aliases:
            match = regex.match(source)
            if match is None:
                continue
            captured = match.group(1) if regex.groups else ""
            for target in targets:
                candidate = target.replace("*", captured, 1)
                resolved = self.resolve_file(
                    os.path.join(self.config.paths_base, candidate)
                )
                if resolved:
                    return resolved
        return None

    def resolve_file(self, base_path: str) -> Optional[str]:
        """Probe base_path as a file, then with extensions, then as a directory index."""
        base_path = os.path.normpath(base_path)

        if os.path.isfile(base_path):
            return canonical_path(base_path)

        for ext in self.extensions:
            candidate = base_path + ext
            if os.path.isfile(candidate):
                return canonical_path(candidate)

        for ext in self.extensions:
            candidate = os.path.join(base_path, "index" + ext)
            if os.path.isfile(candidate):
                return canonical_path(candidate)

        return None
