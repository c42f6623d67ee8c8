"""Debounced, coalescing bridge from file-change events to graph updates.

The host delivers raw events by calling handle_create / handle_change /
handle_delete. Events are coalesced into two pending sets and flushed
together once no new event has arrived for the debounce window:

    pending updates: files created or changed since the last flush
    pending deletes: files deleted since the last flush

A delete cancels a pending update for the same file. A file left in both
sets at flush time is treated as deleted.
"""

import asyncio
import logging
import os
from typing import Optional, Set

from scaffold.builder import ImportGraphBuilder
from scaffold.config import Settings
from scaffold.models import SOURCE_EXTENSIONS, canonical_path

logger = logging.getLogger(__name__)


class FileWatcher:
    """Coalesce file events and apply them to a builder in batches."""

    def __init__(
        self,
        workspace_root: str,
        builder: ImportGraphBuilder,
        settings: Optional[Settings] = None,
    ) -> None:
        self.workspace_root = canonical_path(workspace_root)
        self.builder = builder
        self.settings = settings or builder.settings
        self._pending_updates: Set[str] = set()
        self._pending_deletes: Set[str] = set()
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def pending_updates(self) -> Set[str]:
        return set(self._pending_updates)

    @property
    def pending_deletes(self) -> Set[str]:
        return set(self._pending_deletes)

    # ── Event intake ────────────────────────────────────────────────────

    def handle_create(self, file_path: str) -> None:
        self._queue_update(file_path)

    def handle_change(self, file_path: str) -> None:
        self._queue_update(file_path)

    def handle_delete(self, file_path: str) -> None:
        if self.should_ignore(file_path):
            return
        file_path = canonical_path(file_path)
        self._pending_updates.discard(file_path)
        self._pending_deletes.add(file_path)
        self._schedule_flush()

    def _queue_update(self, file_path: str) -> None:
        if self.should_ignore(file_path):
            return
        file_path = canonical_path(file_path)
        self._pending_updates.add(file_path)
        self._schedule_flush()

    def should_ignore(self, file_path: str) -> bool:
        """Skip excluded dirs, files outside the workspace and non-source files."""
        normalized = canonical_path(file_path)
        root = self.workspace_root.rstrip("/") + "/"
        if not normalized.startswith(root):
            return True

        parts = normalized[len(root):].split("/")
        if any(part in self.settings.exclude_dirs for part in parts[:-1]):
            return True

        return os.path.splitext(normalized)[1] not in SOURCE_EXTENSIONS

    # ── Flushing ────────────────────────────────────────────────────────

    def _schedule_flush(self) -> None:
        """Restart the debounce timer on the running event loop.

        Without a running loop, events only accumulate until flush() is
        called explicitly.
        """
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.call_later(self.settings.debounce_ms / 1000.0, self.flush)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def flush(self) -> int:
        """Apply pending deletes, then pending updates. Returns files applied.

        Fires a single graph-changed notification for the whole batch.
        """
        self._cancel_timer()
        deletes = sorted(self._pending_deletes)
        updates = sorted(self._pending_updates - self._pending_deletes)
        self._pending_deletes.clear()
        self._pending_updates.clear()

        applied = 0
        for file_path in deletes:
            try:
                if self.builder.remove_file(file_path, notify=False):
                    applied += 1
                else:
                    logger.debug("Dropped delete of %s: builder busy", file_path)
            except Exception:
                logger.exception("Failed to remove %s", file_path)

        for file_path in updates:
            try:
                if self.builder.update_file(file_path, notify=False):
                    applied += 1
                else:
                    logger.debug("Dropped update of %s: builder busy", file_path)
            except Exception:
                logger.exception("Failed to update %s", file_path)

        if applied:
            self.builder.notify_graph_changed()
        return applied

    def stop(self) -> None:
        """Cancel any scheduled flush and discard pending events."""
        self._cancel_timer()
        self._pending_updates.clear()
        self._pending_deletes.clear()
