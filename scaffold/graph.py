"""ImportGraph: file-level import graph with degree metrics."""

import hashlib
from typing import Any, Dict, List, Optional

from scaffold.models import LOAD_BEARING_THRESHOLD, FileMetrics, FileNode


def _key(file_path: str) -> str:
    return file_path.replace("\\", "/")


class ImportGraph:
    """Directed graph of file imports.

    Each node keeps both directions of every edge:
        node.imports: files this node imports (outgoing)
        node.imported_by: files that import this node (incoming)

    Edge writes never touch metrics. Call calculate_metrics() once after a
    batch of edge mutations; until then the metrics of any node may be stale.
    """

    def __init__(self, workspace_root: str) -> None:
        self.workspace_root = _key(workspace_root).rstrip("/")
        self._nodes: Dict[str, FileNode] = {}

    def add_node(self, file_path: str) -> FileNode:
        """Return the node for a file, creating an edgeless one if absent."""
        file_path = _key(file_path)
        node = self._nodes.get(file_path)
        if node is None:
            node = FileNode(
                file_path=file_path,
                relative_path=self._relative_path(file_path),
            )
            self._nodes[file_path] = node
        return node

    def add_edge(self, importer_path: str, imported_path: str) -> None:
        """Record that importer imports imported. Idempotent."""
        importer = self.add_node(importer_path)
        imported = self.add_node(imported_path)
        importer.imports.add(imported.file_path)
        imported.imported_by.add(importer.file_path)

    def remove_node(self, file_path: str) -> Optional[FileNode]:
        """Remove a file and scrub it from every neighbour's edge sets."""
        file_path = _key(file_path)
        node = self._nodes.pop(file_path, None)
        if node is None:
            return None

        for imported_path in node.imports:
            imported = self._nodes.get(imported_path)
            if imported is not None:
                imported.imported_by.discard(file_path)

        for importer_path in node.imported_by:
            importer = self._nodes.get(importer_path)
            if importer is not None:
                importer.imports.discard(file_path)

        return node

    def clear_edges_for(self, file_path: str) -> None:
        """Drop a file's outgoing edges before it is re-parsed.

        Incoming edges belong to the importers and are left alone.
        """
        node = self._nodes.get(_key(file_path))
        if node is None:
            return

        for imported_path in node.imports:
            imported = self._nodes.get(imported_path)
            if imported is not None:
                imported.imported_by.discard(node.file_path)

        node.imports = set()

    def calculate_metrics(self) -> None:
        """Recompute metrics for every node from the current edge sets."""
        max_in_degree = max(
            [1] + [len(n.imported_by) for n in self._nodes.values()]
        )

        for node in self._nodes.values():
            in_degree = len(node.imported_by)
            out_degree = len(node.imports)
            node.metrics = FileMetrics(
                in_degree=in_degree,
                out_degree=out_degree,
                is_leaf=in_degree == 0,
                is_load_bearing=in_degree >= LOAD_BEARING_THRESHOLD,
                # Round half up: 12.5 -> 13.
                importance_score=int(in_degree * 100 / max_in_degree + 0.5),
            )

    def get_node(self, file_path: str) -> Optional[FileNode]:
        """Get a node by file path."""
        return self._nodes.get(_key(file_path))

    def get_all_nodes(self) -> List[FileNode]:
        """Get all nodes in the graph."""
        return list(self._nodes.values())

    def get_load_bearing_files(self, limit: int = 20) -> List[FileNode]:
        """Imported files, most-imported first, ties by relative path."""
        imported = [n for n in self._nodes.values() if n.metrics.in_degree > 0]
        imported.sort(key=lambda n: (-n.metrics.in_degree, n.relative_path))
        return imported[:limit]

    def get_leaf_files(self) -> List[FileNode]:
        """Files nobody imports, sorted by relative path."""
        leaves = [n for n in self._nodes.values() if n.metrics.is_leaf]
        leaves.sort(key=lambda n: n.relative_path)
        return leaves

    def get_file_count(self) -> int:
        return len(self._nodes)

    def _relative_path(self, file_path: str) -> str:
        root = self.workspace_root + "/"
        if file_path.startswith(root):
            return file_path[len(root):]
        return file_path

    # ── Serialization ───────────────────────────────────────────────────

    def serialize(self) -> Dict[str, Any]:
        """JSON-safe snapshot of every node, its edges and metrics."""
        return {
            "workspace_root": self.workspace_root,
            "nodes": [
                self._nodes[path].to_dict() for path in sorted(self._nodes)
            ],
        }

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "ImportGraph":
        """Rebuild a graph from serialize() output."""
        graph = cls(data["workspace_root"])
        for nd in data.get("nodes", []):
            node = FileNode.from_dict(nd)
            graph._nodes[node.file_path] = node
        return graph

    def compute_hash(self) -> str:
        """Deterministic digest of nodes and edges.

        Sorts nodes as "{path}" and edges as "{importer}->{imported}",
        joins with "|", SHA256[:16].
        """
        node_strs = sorted(self._nodes)
        edge_strs = sorted(
            f"{n.file_path}->{target}"
            for n in self._nodes.values()
            for target in n.imports
        )
        combined = "|".join(node_strs + edge_strs)
        return hashlib.sha256(combined.encode()).hexdigest()[:16]

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(n.imports) for n in self._nodes.values())

    def __repr__(self) -> str:
        return f"ImportGraph(nodes={self.node_count}, edges={self.edge_count})"
