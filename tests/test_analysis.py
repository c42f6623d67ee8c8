"""Tests for ProjectAnalyzer."""

import json
import os

import pytest

from scaffold.analysis import ProjectAnalyzer
from scaffold.builder import ImportGraphBuilder
from scaffold.config import Settings
from scaffold.models import (
    EntryPoint,
    FrameworkInfo,
    NavigationRoute,
    NavigationStructure,
    canonical_path,
)


class FakeDetector:
    def detect(self):
        return FrameworkInfo(framework="expo", version="50.0.0", config_file="app.json")


class FakeEntryPoints:
    def __init__(self):
        self.seen = None

    def find_entry_points(self, framework):
        self.seen = framework
        return [EntryPoint(file_path="/w/App.tsx", type="app", framework=framework.framework)]


class FakeNavigation:
    def analyze(self, framework):
        return NavigationStructure(
            type="react-navigation",
            routes=[NavigationRoute(name="Home", type="screen")],
        )


class BrokenNavigation:
    def analyze(self, framework):
        raise RuntimeError("navigation exploded")


@pytest.fixture
def workspace(make_workspace):
    files = {f"src/screens/S{i}.tsx": "import { Button } from '../components/Button';\n" for i in range(5)}
    files["src/components/Button.tsx"] = "export const Button = () => null;\n"
    files["index.ts"] = "import './src/screens/S0';\n"
    return make_workspace(files)


def _id(root, rel):
    return canonical_path(os.path.join(root, rel))


def test_run_analysis_with_default_collaborators(workspace):
    analyzer = ProjectAnalyzer(workspace, settings=Settings())
    result = analyzer.run_analysis()

    assert result is analyzer.result
    assert result.framework == FrameworkInfo()
    assert result.entry_points == []
    assert result.navigation.type == "none"
    assert result.total_files == 7
    assert [n.relative_path for n in result.load_bearing_files][0] == "src/components/Button.tsx"
    assert "src/screens" in result.files_by_directory
    assert "(root)" in result.files_by_directory
    assert result.directories[0].path == "src/screens"
    assert result.timestamp > 0


def test_run_analysis_merges_collaborators(workspace):
    entry_points = FakeEntryPoints()
    analyzer = ProjectAnalyzer(
        workspace,
        framework_detector=FakeDetector(),
        entry_point_finder=entry_points,
        navigation_analyzer=FakeNavigation(),
        settings=Settings(),
    )
    result = analyzer.run_analysis()

    assert result.framework.framework == "expo"
    assert entry_points.seen.framework == "expo"
    assert result.entry_points[0].type == "app"
    assert result.navigation.routes[0].name == "Home"


def test_progress_messages(workspace):
    events = []
    analyzer = ProjectAnalyzer(workspace, framework_detector=FakeDetector(), settings=Settings())
    analyzer.run_analysis(progress=lambda m, p: events.append(m))

    assert events[0] == "Detected: expo"
    assert events[1] == "Found entry points"
    assert "Found 7 TypeScript files" in events
    assert events[-2:] == ["Built import graph", "Analyzed navigation"]


def test_load_bearing_limit_from_settings(workspace):
    analyzer = ProjectAnalyzer(workspace, settings=Settings(load_bearing_limit=1))
    result = analyzer.run_analysis()
    assert len(result.load_bearing_files) == 1


def test_collaborator_failure_returns_none(workspace):
    analyzer = ProjectAnalyzer(workspace, navigation_analyzer=BrokenNavigation(), settings=Settings())
    assert analyzer.run_analysis() is None
    # the guard is released after a failure
    analyzer.navigation_analyzer = FakeNavigation()
    assert analyzer.run_analysis() is not None


def test_reentrant_analysis_is_rejected(workspace):
    nested = []
    analyzer = ProjectAnalyzer(workspace, settings=Settings())

    def progress(message, percent):
        if not nested:
            nested.append(analyzer.run_analysis())

    assert analyzer.run_analysis(progress=progress) is not None
    assert nested == [None]


def test_refresh_on_graph_change(workspace):
    builder = ImportGraphBuilder(workspace, settings=Settings())
    analyzer = ProjectAnalyzer(workspace, builder=builder)
    result = analyzer.run_analysis()
    first_stamp = result.timestamp
    assert result.total_files == 7

    builder.remove_file(_id(workspace, "src/screens/S4.tsx"))

    assert analyzer.result is result
    assert result.total_files == 6
    assert result.load_bearing_files[0].metrics.in_degree == 4
    assert result.timestamp >= first_stamp
    assert [f.relative_path for f in result.files_by_directory["src/screens"]] == [
        f"src/screens/S{i}.tsx" for i in range(4)
    ]


def test_refresh_before_first_analysis_is_noop(workspace):
    analyzer = ProjectAnalyzer(workspace, settings=Settings())
    analyzer.refresh()
    assert analyzer.result is None


def test_get_file_info(workspace):
    analyzer = ProjectAnalyzer(workspace, settings=Settings())
    analyzer.run_analysis()

    info = analyzer.get_file_info(os.path.join(workspace, "src", "screens", "S0.tsx"))
    assert info["relative_path"] == "src/screens/S0.tsx"
    assert info["imports"] == [{
        "file_path": _id(workspace, "src/components/Button.tsx"),
        "relative_path": "src/components/Button.tsx",
    }]
    assert [r["relative_path"] for r in info["imported_by"]] == ["index.ts"]
    assert info["metrics"].in_degree == 1

    assert analyzer.get_file_info(os.path.join(workspace, "missing.ts")) is None


def test_result_to_dict_is_json_safe(workspace):
    analyzer = ProjectAnalyzer(
        workspace, navigation_analyzer=FakeNavigation(), settings=Settings(),
    )
    data = analyzer.run_analysis().to_dict()
    decoded = json.loads(json.dumps(data))
    assert decoded["total_files"] == 7
    assert decoded["navigation"]["routes"][0]["children"] == []
    button = decoded["load_bearing_files"][0]
    assert button["metrics"]["in_degree"] == 5
    assert isinstance(button["imported_by"], list)
