"""Core data structures for Scaffold."""

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Set


# Incoming-edge count at which a file counts as load-bearing.
LOAD_BEARING_THRESHOLD = 5

# Files the graph is built from.
SOURCE_EXTENSIONS = (".ts", ".tsx")

# Extension probing order used by module resolution. Order is priority.
RESOLVE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

# Directory names never walked or watched.
DEFAULT_EXCLUDE_DIRS = frozenset({"node_modules"})


def canonical_path(path: str) -> str:
    """Normalize a path into a FileIdentity: absolute, '/'-separated."""
    return os.path.normpath(os.path.abspath(path)).replace("\\", "/")


def is_external_specifier(source: str) -> bool:
    """Bare/package specifiers ('react', '@scope/pkg') live outside the graph."""
    return not source.startswith(".") and not source.startswith("/")


@dataclass
class ImportFact:
    """One import declaration in a file."""
    source: str  # raw specifier, e.g. './utils' or 'react'
    resolved_path: Optional[str] = None  # FileIdentity, local + resolvable only
    is_external: bool = False
    is_type_only: bool = False
    imported_names: List[str] = field(default_factory=list)
    has_default: bool = False
    has_namespace: bool = False


@dataclass
class ExportFact:
    """One exported binding. Informational only, never an edge."""
    name: str
    is_default: bool = False
    is_type: bool = False


@dataclass
class ParsedFile:
    """Facts extracted from one file."""
    file_path: str
    imports: List[ImportFact] = field(default_factory=list)
    exports: List[ExportFact] = field(default_factory=list)
    has_jsx: bool = False

    @property
    def local_imports(self) -> List[str]:
        """Resolved identities of local imports, in declaration order."""
        return [
            imp.resolved_path for imp in self.imports
            if not imp.is_external and imp.resolved_path
        ]


@dataclass
class FileMetrics:
    """Degree-derived metrics for one file."""
    in_degree: int = 0
    out_degree: int = 0
    is_leaf: bool = True
    is_load_bearing: bool = False
    importance_score: int = 0


@dataclass
class FileNode:
    """A file in the import graph."""
    file_path: str  # FileIdentity
    relative_path: str
    imports: Set[str] = field(default_factory=set)  # outgoing: files this file imports
    imported_by: Set[str] = field(default_factory=set)  # incoming: files importing this one
    metrics: FileMetrics = field(default_factory=FileMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "relative_path": self.relative_path,
            "imports": sorted(self.imports),
            "imported_by": sorted(self.imported_by),
            "metrics": asdict(self.metrics),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileNode":
        return cls(
            file_path=data["file_path"],
            relative_path=data["relative_path"],
            imports=set(data.get("imports", [])),
            imported_by=set(data.get("imported_by", [])),
            metrics=FileMetrics(**data.get("metrics", {})),
        )


@dataclass
class DirectoryStats:
    """File count for one directory group."""
    path: str
    name: str
    file_count: int
    category: str = "other"  # components | hooks | services | utils | screens | pages | api | other


@dataclass
class FileSummary:
    """Lightweight per-file row used in directory listings."""
    file_path: str
    relative_path: str
    metrics: FileMetrics


# ── Collaborator results (produced outside the graph core) ──────────────

@dataclass
class FrameworkInfo:
    framework: str = "unknown"  # expo | react-native | nextjs | react-web | unknown
    version: Optional[str] = None
    config_file: Optional[str] = None


@dataclass
class EntryPoint:
    file_path: str
    type: str  # main | app | page | layout | index
    framework: str = "unknown"


@dataclass
class NavigationRoute:
    name: str
    type: str  # screen | page | layout | navigator | route
    file_path: Optional[str] = None
    children: List["NavigationRoute"] = field(default_factory=list)


@dataclass
class NavigationStructure:
    type: str = "none"  # react-navigation | nextjs-pages | nextjs-app | react-router | none
    routes: List[NavigationRoute] = field(default_factory=list)
    config_file: Optional[str] = None


@dataclass
class AnalysisResult:
    """Everything the UI panel renders for one workspace."""
    framework: FrameworkInfo
    entry_points: List[EntryPoint]
    navigation: NavigationStructure
    directories: List[DirectoryStats]
    files_by_directory: Dict[str, List[FileSummary]]
    load_bearing_files: List[FileNode]
    leaf_files: List[FileNode]
    total_files: int
    timestamp: int  # epoch milliseconds

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe rendering (sets become sorted lists)."""
        return {
            "framework": asdict(self.framework),
            "entry_points": [asdict(e) for e in self.entry_points],
            "navigation": asdict(self.navigation),
            "directories": [asdict(d) for d in self.directories],
            "files_by_directory": {
                key: [asdict(f) for f in files]
                for key, files in self.files_by_directory.items()
            },
            "load_bearing_files": [n.to_dict() for n in self.load_bearing_files],
            "leaf_files": [n.to_dict() for n in self.leaf_files],
            "total_files": self.total_files,
            "timestamp": self.timestamp,
        }
