"""Read-side views over a built ImportGraph: directories, tiers, summaries."""

import posixpath
from typing import Dict, List, Optional, Tuple

from scaffold.graph import ImportGraph
from scaffold.models import DirectoryStats, FileNode, FileSummary

ROOT_GROUP = "(root)"

# (category, vocabulary) in priority order, matched against the directory name.
NAME_CATEGORIES: List[Tuple[str, Tuple[str, ...]]] = [
    ("components", ("component", "components", "ui")),
    ("hooks", ("hook", "hooks")),
    ("services", ("service", "services", "api", "apis")),
    ("utils", ("util", "utils", "helper", "helpers", "lib")),
    ("screens", ("screen", "screens", "view", "views")),
    ("pages", ("page", "pages", "routes")),
]
# Matched against the full directory path once no name category applies.
PATH_CATEGORIES: List[Tuple[str, Tuple[str, ...]]] = [
    ("api", ("api/", "apis/", "/api", "server/")),
]

TIER_THRESHOLDS = [(75, "critical"), (50, "high"), (25, "medium")]


def _round1(value: float) -> float:
    """Round half up to one decimal."""
    return int(value * 10 + 0.5) / 10


def _matches_any(text: str, patterns: Tuple[str, ...]) -> bool:
    return any(p in text for p in patterns)


class FileMetricsCalculator:
    """Pure functions of graph state; nothing here mutates the graph."""

    def __init__(self, workspace_root: str) -> None:
        self.workspace_root = workspace_root

    # ── Directories ─────────────────────────────────────────────────────

    @staticmethod
    def group_key(relative_path: str) -> Optional[str]:
        """Top-level directory of a file, looking one level into src/.

        'src/components/Button.tsx' -> 'src/components'
        'lib/a/b.ts' -> 'lib'
        'index.ts' -> None
        """
        dir_path = posixpath.dirname(relative_path.replace("\\", "/"))
        if not dir_path or dir_path == ".":
            return None
        parts = dir_path.split("/")
        if parts[0] == "src" and len(parts) > 1:
            return f"src/{parts[1]}"
        return parts[0] or None

    @staticmethod
    def categorize_directory(dir_path: str) -> str:
        """Map a directory to components/hooks/services/utils/screens/pages/api/other."""
        name = posixpath.basename(dir_path).lower()
        full_path = dir_path.lower()

        for category, vocabulary in NAME_CATEGORIES:
            if _matches_any(name, vocabulary):
                return category
        for category, vocabulary in PATH_CATEGORIES:
            if _matches_any(full_path, vocabulary):
                return category
        return "other"

    def get_directory_stats(self, graph: ImportGraph) -> List[DirectoryStats]:
        """File counts per group key, largest first, ties by path."""
        counts: Dict[str, int] = {}
        for node in graph.get_all_nodes():
            key = self.group_key(node.relative_path)
            if key:
                counts[key] = counts.get(key, 0) + 1

        stats = [
            DirectoryStats(
                path=dir_path,
                name=posixpath.basename(dir_path) or dir_path,
                file_count=count,
                category=self.categorize_directory(dir_path),
            )
            for dir_path, count in counts.items()
        ]
        stats.sort(key=lambda s: (-s.file_count, s.path))
        return stats

    def group_files_by_directory(self, graph: ImportGraph) -> Dict[str, List[FileSummary]]:
        """Files per group key; root-level files go under '(root)'."""
        groups: Dict[str, List[FileSummary]] = {}
        nodes = sorted(graph.get_all_nodes(), key=lambda n: n.relative_path)
        for node in nodes:
            key = self.group_key(node.relative_path) or ROOT_GROUP
            groups.setdefault(key, []).append(FileSummary(
                file_path=node.file_path,
                relative_path=node.relative_path,
                metrics=node.metrics,
            ))
        return dict(sorted(groups.items()))

    # ── Files ───────────────────────────────────────────────────────────

    def get_load_bearing_files(self, graph: ImportGraph, limit: int = 20) -> List[FileNode]:
        return graph.get_load_bearing_files(limit)

    def get_leaf_files(self, graph: ImportGraph) -> List[FileNode]:
        return graph.get_leaf_files()

    def get_file_metrics(self, graph: ImportGraph, file_path: str) -> Optional[FileNode]:
        return graph.get_node(file_path)

    def get_summary_stats(self, graph: ImportGraph) -> Dict[str, float]:
        nodes = graph.get_all_nodes()
        total = len(nodes)
        if total == 0:
            return {
                "total_files": 0,
                "leaf_file_count": 0,
                "load_bearing_count": 0,
                "average_imports": 0,
                "average_imported_by": 0,
            }

        total_imports = sum(n.metrics.out_degree for n in nodes)
        total_imported_by = sum(n.metrics.in_degree for n in nodes)
        return {
            "total_files": total,
            "leaf_file_count": sum(1 for n in nodes if n.metrics.is_leaf),
            "load_bearing_count": sum(1 for n in nodes if n.metrics.is_load_bearing),
            "average_imports": _round1(total_imports / total),
            "average_imported_by": _round1(total_imported_by / total),
        }

    @staticmethod
    def get_importance_tier(score: int) -> str:
        """critical (>=75), high (>=50), medium (>=25), else low."""
        for threshold, tier in TIER_THRESHOLDS:
            if score >= threshold:
                return tier
        return "low"

    def describe_file(self, node: FileNode) -> str:
        m = node.metrics
        tier = self.get_importance_tier(m.importance_score)
        lines = [
            node.relative_path,
            f"  imported by: {m.in_degree}  imports: {m.out_degree}",
            f"  importance: {m.importance_score} ({tier})",
        ]
        if m.is_load_bearing:
            lines.append("  load-bearing: changes here ripple widely")
        if m.is_leaf:
            lines.append("  leaf: nothing imports this file")
        return "\n".join(lines)
