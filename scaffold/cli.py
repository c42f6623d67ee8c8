"""Command-line front end for the import graph.

Usage:
    scaffold build                  — Full build, save state
    scaffold summary                — File counts, averages, directories
    scaffold load-bearing [--limit] — Most-imported files
    scaffold leaves                 — Files nothing imports
    scaffold file <path>            — One file's metrics, imports and importers
    scaffold analyze                — Full analysis result as JSON
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from scaffold.analysis import ProjectAnalyzer
from scaffold.builder import ImportGraphBuilder
from scaffold.config import load_settings
from scaffold.graph import ImportGraph
from scaffold.metrics import FileMetricsCalculator
from scaffold.storage.memory import is_state_stale, load_project_state, save_project_state

logger = logging.getLogger(__name__)


def _build_and_save(project_path: str) -> ImportGraph:
    builder = ImportGraphBuilder(project_path)
    graph = builder.build_graph()
    if graph is None:
        graph = builder.get_graph()
    save_project_state(graph, project_path)
    return graph


def _load_graph(project_path: str) -> ImportGraph:
    """Saved state if fresh, otherwise a new build."""
    if not is_state_stale(project_path):
        graph = load_project_state(project_path)
        if graph is not None:
            return graph
    logger.info("No fresh state for %s, building", project_path)
    return _build_and_save(project_path)


def _print_nodes(calc: FileMetricsCalculator, nodes) -> None:
    for node in nodes:
        m = node.metrics
        tier = calc.get_importance_tier(m.importance_score)
        print(f"  {node.relative_path}  (imported by {m.in_degree}, {tier})")


# ── Commands ────────────────────────────────────────────────────────────

def cmd_build(args) -> int:
    graph = _build_and_save(args.project_path)
    print(f"Files: {graph.node_count}  Edges: {graph.edge_count}  Hash: {graph.compute_hash()}")
    return 0


def cmd_summary(args) -> int:
    graph = _load_graph(args.project_path)
    calc = FileMetricsCalculator(args.project_path)
    stats = calc.get_summary_stats(graph)

    print("\nProject Summary")
    print(f"{'='*50}")
    print(f"Files: {stats['total_files']}  Leaf: {stats['leaf_file_count']}  "
          f"Load-bearing: {stats['load_bearing_count']}")
    print(f"Average imports: {stats['average_imports']}  "
          f"Average imported by: {stats['average_imported_by']}")

    directories = calc.get_directory_stats(graph)
    if directories:
        print("\nDirectories:")
        for d in directories:
            print(f"  {d.path}: {d.file_count} files ({d.category})")
    return 0


def cmd_load_bearing(args) -> int:
    graph = _load_graph(args.project_path)
    calc = FileMetricsCalculator(args.project_path)
    files = calc.get_load_bearing_files(graph, args.limit)
    if not files:
        print("No imported files.")
        return 0
    print(f"Most-imported files (top {args.limit}):")
    _print_nodes(calc, files)
    return 0


def cmd_leaves(args) -> int:
    graph = _load_graph(args.project_path)
    calc = FileMetricsCalculator(args.project_path)
    files = calc.get_leaf_files(graph)
    print(f"Leaf files ({len(files)}):")
    _print_nodes(calc, files)
    return 0


def cmd_file(args) -> int:
    graph = _load_graph(args.project_path)
    calc = FileMetricsCalculator(args.project_path)
    node = calc.get_file_metrics(graph, os.path.join(args.project_path, args.path))
    if node is None:
        print(f"Not in graph: {args.path}")
        return 1

    print(calc.describe_file(node))
    for label, paths in (("Imports", node.imports), ("Imported by", node.imported_by)):
        if paths:
            print(f"\n{label}:")
            for p in sorted(paths):
                other = graph.get_node(p)
                print(f"  {other.relative_path if other else p}")
    return 0


def cmd_analyze(args) -> int:
    analyzer = ProjectAnalyzer(args.project_path)
    result = analyzer.run_analysis()
    if result is None:
        print("Analysis failed.", file=sys.stderr)
        return 1
    save_project_state(analyzer.builder.get_graph(), args.project_path)
    print(json.dumps(result.to_dict(), indent=2))
    return 0


COMMANDS = {
    "build": cmd_build,
    "summary": cmd_summary,
    "load-bearing": cmd_load_bearing,
    "leaves": cmd_leaves,
    "file": cmd_file,
    "analyze": cmd_analyze,
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--project-path", default=os.getcwd(), help="Project root directory")
    common.add_argument("--log-level", default="WARNING", help="Logging level")

    parser = argparse.ArgumentParser(prog="scaffold", description="TypeScript import graph")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("build", parents=[common], help="Build and save the graph")
    sub.add_parser("summary", parents=[common], help="Summary and directory stats")
    lb = sub.add_parser("load-bearing", parents=[common], help="Most-imported files")
    lb.add_argument("--limit", type=int, default=None, help="Number of files to list")
    sub.add_parser("leaves", parents=[common], help="Files nothing imports")
    fp = sub.add_parser("file", parents=[common], help="Dependencies of one file")
    fp.add_argument("path", help="File path, relative to the project root or absolute")
    sub.add_parser("analyze", parents=[common], help="Full analysis as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    args.project_path = os.path.abspath(args.project_path)
    if getattr(args, "limit", 0) is None:
        args.limit = load_settings().load_bearing_limit
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
