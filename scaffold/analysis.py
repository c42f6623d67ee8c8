"""ProjectAnalyzer: assemble an AnalysisResult for one workspace.

The import graph and its metrics are computed here. Framework detection,
entry-point discovery and navigation analysis are supplied by pluggable
collaborators; the defaults report nothing.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Protocol

from scaffold.builder import ImportGraphBuilder, ProgressCallback, report_progress
from scaffold.config import Settings, load_settings
from scaffold.graph import ImportGraph
from scaffold.metrics import FileMetricsCalculator
from scaffold.models import (
    AnalysisResult,
    EntryPoint,
    FrameworkInfo,
    NavigationStructure,
    canonical_path,
)

logger = logging.getLogger(__name__)


# ── Collaborator interfaces ─────────────────────────────────────────────

class FrameworkDetector(Protocol):
    def detect(self) -> FrameworkInfo: ...


class EntryPointFinder(Protocol):
    def find_entry_points(self, framework: FrameworkInfo) -> List[EntryPoint]: ...


class NavigationAnalyzer(Protocol):
    def analyze(self, framework: str) -> NavigationStructure: ...


class UnknownFrameworkDetector:
    def detect(self) -> FrameworkInfo:
        return FrameworkInfo()


class NoEntryPointFinder:
    def find_entry_points(self, framework: FrameworkInfo) -> List[EntryPoint]:
        return []


class NoNavigationAnalyzer:
    def analyze(self, framework: str) -> NavigationStructure:
        return NavigationStructure()


def _now_ms() -> int:
    return int(time.time() * 1000)


# ── Analyzer ────────────────────────────────────────────────────────────

class ProjectAnalyzer:
    """Runs the full analysis and keeps its result current as files change."""

    def __init__(
        self,
        workspace_root: str,
        builder: Optional[ImportGraphBuilder] = None,
        framework_detector: Optional[FrameworkDetector] = None,
        entry_point_finder: Optional[EntryPointFinder] = None,
        navigation_analyzer: Optional[NavigationAnalyzer] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.workspace_root = canonical_path(workspace_root)
        if settings is None:
            settings = builder.settings if builder is not None else load_settings()
        self.settings = settings
        self.builder = builder or ImportGraphBuilder(self.workspace_root, settings=settings)
        self.metrics = FileMetricsCalculator(self.workspace_root)
        self.framework_detector = framework_detector or UnknownFrameworkDetector()
        self.entry_point_finder = entry_point_finder or NoEntryPointFinder()
        self.navigation_analyzer = navigation_analyzer or NoNavigationAnalyzer()

        self.result: Optional[AnalysisResult] = None
        self._running = False
        self.builder.add_listener(self.refresh)

    def run_analysis(self, progress: Optional[ProgressCallback] = None) -> Optional[AnalysisResult]:
        """Detect framework, find entry points, build the graph, analyze navigation.

        Returns None if an analysis is already running or a step fails.
        """
        if self._running:
            logger.debug("Analysis already running, ignoring request")
            return None

        self._running = True
        try:
            framework = self.framework_detector.detect()
            report_progress(progress, f"Detected: {framework.framework}", 0)

            entry_points = self.entry_point_finder.find_entry_points(framework)
            report_progress(progress, "Found entry points", 0)

            graph = self.builder.build_graph(progress)
            if graph is None:
                logger.debug("Graph build already in flight, using current graph")
                graph = self.builder.get_graph()
            report_progress(progress, "Built import graph", 100)

            navigation = self.navigation_analyzer.analyze(framework.framework)
            report_progress(progress, "Analyzed navigation", 100)

            self.result = AnalysisResult(
                framework=framework,
                entry_points=entry_points,
                navigation=navigation,
                timestamp=_now_ms(),
                **self._graph_views(graph),
            )
            return self.result
        except Exception:
            logger.exception("Analysis failed for %s", self.workspace_root)
            return None
        finally:
            self._running = False

    def refresh(self) -> None:
        """Recompute the graph-derived parts of the last result."""
        if self.result is None:
            return
        graph = self.builder.get_graph()
        for name, value in self._graph_views(graph).items():
            setattr(self.result, name, value)
        self.result.timestamp = _now_ms()

    def _graph_views(self, graph: ImportGraph) -> Dict[str, Any]:
        return {
            "directories": self.metrics.get_directory_stats(graph),
            "files_by_directory": self.metrics.group_files_by_directory(graph),
            "load_bearing_files": self.metrics.get_load_bearing_files(
                graph, self.settings.load_bearing_limit
            ),
            "leaf_files": self.metrics.get_leaf_files(graph),
            "total_files": graph.get_file_count(),
        }

    def get_file_info(self, file_path: str) -> Optional[Dict[str, Any]]:
        """Dependencies of one file in both directions, or None if untracked."""
        graph = self.builder.get_graph()
        node = graph.get_node(canonical_path(file_path))
        if node is None:
            return None

        def _ref(path: str) -> Dict[str, str]:
            other = graph.get_node(path)
            return {
                "file_path": path,
                "relative_path": other.relative_path if other else path,
            }

        return {
            "file_path": node.file_path,
            "relative_path": node.relative_path,
            "imports": [_ref(p) for p in sorted(node.imports)],
            "imported_by": [_ref(p) for p in sorted(node.imported_by)],
            "metrics": node.metrics,
        }

