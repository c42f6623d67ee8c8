"""Scaffold: live import graph and structural metrics for TypeScript projects."""

from scaffold.models import (
    AnalysisResult,
    DirectoryStats,
    ExportFact,
    FileMetrics,
    FileNode,
    ImportFact,
    ParsedFile,
)
from scaffold.graph import ImportGraph
from scaffold.builder import ImportGraphBuilder
from scaffold.metrics import FileMetricsCalculator
from scaffold.watcher import FileWatcher
from scaffold.analysis import ProjectAnalyzer

__all__ = [
    "AnalysisResult",
    "DirectoryStats",
    "ExportFact",
    "FileMetrics",
    "FileNode",
    "ImportFact",
    "ParsedFile",
    "ImportGraph",
    "ImportGraphBuilder",
    "FileMetricsCalculator",
    "FileWatcher",
    "ProjectAnalyzer",
]
