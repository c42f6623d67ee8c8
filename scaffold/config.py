"""Project configuration: tsconfig path aliases and runtime settings."""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from scaffold.models import DEFAULT_EXCLUDE_DIRS

logger = logging.getLogger(__name__)

TSCONFIG_NAME = "tsconfig.json"
MAX_EXTENDS_DEPTH = 6


@dataclass
class ResolverConfig:
    """Inputs for non-relative module resolution.

    base_url: directory bare specifiers fall back to (compilerOptions.baseUrl).
    paths: alias pattern -> ordered replacement templates, declaration order kept.
    paths_base: directory the replacement templates are relative to.
    """
    base_url: Optional[str] = None
    paths: Dict[str, List[str]] = field(default_factory=dict)
    paths_base: Optional[str] = None
    config_file: Optional[str] = None

    @classmethod
    def default(cls, workspace_root: str) -> "ResolverConfig":
        """Fallback when no usable tsconfig exists: baseUrl = workspace root."""
        return cls(base_url=os.path.abspath(workspace_root))


# ── JSONC ───────────────────────────────────────────────────────────────

# Strings are matched so comment markers inside them survive.
_JSONC_TOKEN = re.compile(
    r'(?:'
    r'"(?:[^"\\]|\\.)*"'      # string literal, kept
    r'|//[^\n]*'              # line comment
    r'|/\*[\s\S]*?\*/'        # block comment
    r')'
)
_TRAILING_COMMA = re.compile(r',(\s*[}\]])')


def _strip_jsonc(text: str) -> str:
    def _replace(m: re.Match) -> str:
        token = m.group(0)
        return token if token.startswith('"') else ""
    stripped = _JSONC_TOKEN.sub(_replace, text)
    # Odd indices are string literals; trailing commas are dropped elsewhere.
    parts = re.split(r'("(?:[^"\\]|\\.)*")', stripped)
    for i in range(0, len(parts), 2):
        parts[i] = _TRAILING_COMMA.sub(r'\1', parts[i])
    return "".join(parts)


def load_jsonc(path: str) -> dict:
    """Read a JSON-with-comments file. Raises OSError / ValueError."""
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()
    data = json.loads(_strip_jsonc(raw))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level is not an object")
    return data


# ── tsconfig discovery ──────────────────────────────────────────────────

def find_config_file(start_dir: str, name: str = TSCONFIG_NAME) -> Optional[str]:
    """Search start_dir and its ancestors for a config file."""
    current = os.path.abspath(start_dir)
    while True:
        candidate = os.path.join(current, name)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _resolve_extends(config_path: str, extends: str) -> Optional[str]:
    """Locate a relative `extends` target. Package extends are not followed."""
    if not extends.startswith(("./", "../", "/")):
        return None
    candidate = extends if extends.endswith(".json") else extends + ".json"
    path = os.path.normpath(os.path.join(os.path.dirname(config_path), candidate))
    return path if os.path.isfile(path) else None


def _config_chain(config_path: str) -> List[str]:
    """Config files from the leaf config up through its `extends` parents."""
    chain: List[str] = []
    current: Optional[str] = config_path
    while current and len(chain) < MAX_EXTENDS_DEPTH and current not in chain:
        chain.append(current)
        data = load_jsonc(current)
        extends = data.get("extends")
        current = _resolve_extends(current, extends) if isinstance(extends, str) else None
    return chain


def _validate_paths(paths: object, config_path: str) -> Dict[str, List[str]]:
    if not isinstance(paths, dict):
        raise ValueError(f"{config_path}: compilerOptions.paths is not an object")
    result: Dict[str, List[str]] = {}
    for pattern, targets in paths.items():
        if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
            raise ValueError(f"{config_path}: paths[{pattern!r}] is not a list of strings")
        if pattern.count("*") > 1 or any(t.count("*") > 1 for t in targets):
            raise ValueError(f"{config_path}: paths[{pattern!r}] has more than one '*'")
        result[pattern] = list(targets)
    return result


def load_resolver_config(workspace_root: str) -> ResolverConfig:
    """Load baseUrl/paths from the nearest tsconfig.json.

    Never raises: a missing, unreadable or malformed config yields
    ResolverConfig.default(workspace_root).
    """
    config_path = find_config_file(workspace_root)
    if config_path is None:
        return ResolverConfig.default(workspace_root)

    try:
        chain = _config_chain(config_path)
        base_url: Optional[str] = None
        paths: Optional[Dict[str, List[str]]] = None
        paths_base: Optional[str] = None

        # Walk from the root-most parent down so children override.
        for path in reversed(chain):
            options = load_jsonc(path).get("compilerOptions") or {}
            if not isinstance(options, dict):
                raise ValueError(f"{path}: compilerOptions is not an object")
            config_dir = os.path.dirname(path)
            if isinstance(options.get("baseUrl"), str):
                base_url = os.path.normpath(os.path.join(config_dir, options["baseUrl"]))
            if "paths" in options:
                paths = _validate_paths(options["paths"], path)
                paths_base = config_dir
    except (OSError, ValueError) as exc:
        logger.warning("Could not load %s, using defaults: %s", config_path, exc)
        return ResolverConfig.default(workspace_root)

    if paths and base_url is not None:
        paths_base = base_url

    return ResolverConfig(
        base_url=base_url,
        paths=paths or {},
        paths_base=paths_base if paths else None,
        config_file=config_path,
    )


# ── Runtime settings ────────────────────────────────────────────────────

@dataclass
class Settings:
    debounce_ms: int = 500
    exclude_dirs: frozenset = DEFAULT_EXCLUDE_DIRS
    state_dir: str = "~/.scaffold"
    load_bearing_limit: int = 20


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r: negative", name, raw)
        return default
    return value


def load_settings() -> Settings:
    """Read SCAFFOLD_* environment variables."""
    exclude_raw = os.environ.get("SCAFFOLD_EXCLUDE_DIRS", "")
    exclude = frozenset(d.strip() for d in exclude_raw.split(",") if d.strip())
    return Settings(
        debounce_ms=_env_int("SCAFFOLD_DEBOUNCE_MS", 500),
        exclude_dirs=exclude or DEFAULT_EXCLUDE_DIRS,
        state_dir=os.environ.get("SCAFFOLD_STATE_DIR", "") or "~/.scaffold",
        load_bearing_limit=_env_int("SCAFFOLD_LOAD_BEARING_LIMIT", 20),
    )
