"""JSON persistence of import graphs, keyed by project path."""

import hashlib
import json
import logging
import os
import time
from typing import Optional

from scaffold.config import load_settings
from scaffold.graph import ImportGraph

logger = logging.getLogger(__name__)

CURRENT_FORMAT_VERSION = 1


class StateVersionError(ValueError):
    """State file was written by a newer scaffold."""


def serialize_graph(graph: ImportGraph) -> dict:
    """Serialize an ImportGraph to a JSON-safe dict."""
    data = graph.serialize()
    data["format_version"] = CURRENT_FORMAT_VERSION
    return data


def deserialize_graph(data: dict) -> ImportGraph:
    """Deserialize a dict into an ImportGraph.

    Raises StateVersionError if format_version is newer than supported.
    """
    version = data.get("format_version", 1)
    if version > CURRENT_FORMAT_VERSION:
        raise StateVersionError(
            f"State file format v{version} is newer than supported "
            f"v{CURRENT_FORMAT_VERSION}. Please update scaffold."
        )
    return ImportGraph.deserialize(data)


def _get_project_id(project_path: str) -> str:
    """Generate a stable project ID from the absolute project path."""
    return hashlib.sha256(os.path.abspath(project_path).encode()).hexdigest()[:12]


def _get_project_state_path(project_path: str) -> str:
    """Get the state file path for a project."""
    state_dir = os.path.expanduser(load_settings().state_dir)
    project_id = _get_project_id(project_path)
    return os.path.join(state_dir, f"graph_{project_id}.json")


def save_project_state(graph: ImportGraph, project_path: str) -> str:
    """Save graph state keyed by project path. Returns the state file path."""
    state_file = _get_project_state_path(project_path)
    os.makedirs(os.path.dirname(state_file), exist_ok=True)

    data = serialize_graph(graph)
    data["project_path"] = os.path.abspath(project_path)
    data["saved_at"] = time.time()

    with open(state_file, "w") as f:
        json.dump(data, f)

    logger.debug("Saved %r to %s", graph, state_file)
    return state_file


def load_project_state(project_path: str) -> Optional[ImportGraph]:
    """Load graph state by project path; None if missing or unusable."""
    state_file = _get_project_state_path(project_path)

    if not os.path.exists(state_file):
        return None

    try:
        with open(state_file, "r") as f:
            data = json.load(f)
        return deserialize_graph(data)
    except StateVersionError as exc:
        logger.warning("%s", exc)
        return None
    except (ValueError, KeyError, TypeError, AttributeError, OSError) as exc:
        _remove_corrupt(state_file, exc)
        return None


def _remove_corrupt(state_file: str, exc: Exception) -> None:
    logger.warning("Corrupt project state %s, removing (%s)", state_file, type(exc).__name__)
    try:
        os.remove(state_file)
    except OSError:
        pass


def is_state_stale(project_path: str, max_age_hours: float = 24.0) -> bool:
    """Check if the project state file is too old to be useful.

    Uses file mtime instead of parsing JSON for speed.
    """
    state_file = _get_project_state_path(project_path)
    if not os.path.exists(state_file):
        return True
    try:
        mtime = os.path.getmtime(state_file)
        return (time.time() - mtime) > (max_age_hours * 3600)
    except OSError:
        return True
