"""ImportGraphBuilder: full-workspace builds and single-file patches."""

import logging
import os
import threading
from typing import Callable, List, Optional

from scaffold.config import Settings, load_resolver_config, load_settings
from scaffold.graph import ImportGraph
from scaffold.languages.registry import ParserRegistry, create_default_registry
from scaffold.languages.resolver import ModuleResolver
from scaffold.models import SOURCE_EXTENSIONS, canonical_path

logger = logging.getLogger(__name__)

# progress(message, percent)
ProgressCallback = Callable[[str, int], None]
GraphListener = Callable[[], None]


class ImportGraphBuilder:
    """Owns the authoritative ImportGraph for one workspace.

    build_graph() builds a fresh graph off to the side and swaps it in when
    complete, so readers of get_graph() never see a half-built graph.
    update_file()/remove_file() patch the current graph in place.

    At most one build or patch runs at a time. A request arriving while
    another is in flight is dropped, not queued.
    """

    def __init__(
        self,
        workspace_root: str,
        registry: Optional[ParserRegistry] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.workspace_root = canonical_path(workspace_root)
        self.settings = settings or load_settings()
        if registry is None:
            resolver = ModuleResolver(load_resolver_config(self.workspace_root))
            registry = create_default_registry(resolver)
        self.registry = registry
        self._graph = ImportGraph(self.workspace_root)
        self._busy = threading.Lock()
        self._listeners: List[GraphListener] = []

    def get_graph(self) -> ImportGraph:
        return self._graph

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    # ── Full build ──────────────────────────────────────────────────────

    def build_graph(self, progress: Optional[ProgressCallback] = None) -> Optional[ImportGraph]:
        """Parse every source file under the workspace into a new graph.

        Returns the new graph, or None if another build/update is running.
        """
        if not self._busy.acquire(blocking=False):
            logger.debug("Build requested while busy, ignoring")
            return None
        try:
            graph = ImportGraph(self.workspace_root)
            files = self.find_source_files()
            total = len(files)
            report_progress(progress, f"Found {total} TypeScript files", 0)

            failed = 0
            for i, file_path in enumerate(files, 1):
                if not self._process_file(graph, file_path):
                    failed += 1
                percent = int(i * 100 / total + 0.5)
                report_progress(progress, f"Parsing: {os.path.basename(file_path)}", percent)

            graph.calculate_metrics()
            self._graph = graph
            report_progress(progress, "Analysis complete", 100)
            logger.info(
                "Built import graph for %s: %d files, %d edges, %d skipped",
                self.workspace_root, graph.node_count, graph.edge_count, failed,
            )
        finally:
            self._busy.release()

        self.notify_graph_changed()
        return graph

    def find_source_files(self) -> List[str]:
        """All .ts/.tsx files under the workspace, excluded dirs pruned, sorted."""
        found: List[str] = []
        for dirpath, dirnames, filenames in os.walk(self.workspace_root):
            dirnames[:] = sorted(
                d for d in dirnames if d not in self.settings.exclude_dirs
            )
            for fname in sorted(filenames):
                if fname.endswith(SOURCE_EXTENSIONS):
                    found.append(canonical_path(os.path.join(dirpath, fname)))
        return found

    # ── Incremental updates ─────────────────────────────────────────────

    def update_file(self, file_path: str, notify: bool = True) -> bool:
        """Re-parse one file: clear its outgoing edges, re-add, recompute metrics."""
        if not self._busy.acquire(blocking=False):
            logger.debug("Update of %s requested while busy, ignoring", file_path)
            return False
        try:
            file_path = canonical_path(file_path)
            self._graph.clear_edges_for(file_path)
            self._process_file(self._graph, file_path)
            self._graph.calculate_metrics()
        finally:
            self._busy.release()

        if notify:
            self.notify_graph_changed()
        return True

    def remove_file(self, file_path: str, notify: bool = True) -> bool:
        """Drop a deleted file and every edge touching it."""
        if not self._busy.acquire(blocking=False):
            logger.debug("Removal of %s requested while busy, ignoring", file_path)
            return False
        try:
            self._graph.remove_node(canonical_path(file_path))
            self._graph.calculate_metrics()
        finally:
            self._busy.release()

        if notify:
            self.notify_graph_changed()
        return True

    def _process_file(self, graph: ImportGraph, file_path: str) -> bool:
        """Parse one file and write its local imports as edges.

        A file that cannot be parsed contributes nothing and returns False.
        """
        parser = self.registry.get_parser(file_path)
        if parser is None:
            return False

        try:
            parsed = parser.parse_file(file_path)
        except Exception as exc:
            logger.warning("Failed to parse %s: %s", file_path, exc)
            return False
        if parsed is None:
            return False

        graph.add_node(file_path)
        for resolved in parsed.local_imports:
            graph.add_edge(file_path, resolved)
        return True

    # ── Listeners ───────────────────────────────────────────────────────

    def add_listener(self, listener: GraphListener) -> None:
        """Register a no-argument callback fired after every applied change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: GraphListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_graph_changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Graph-changed listener %r failed", listener)


def report_progress(progress: Optional[ProgressCallback], message: str, percent: int) -> None:
    if progress is not None:
        progress(message, percent)
