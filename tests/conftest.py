"""Pytest configuration and fixtures for ModGraph CLI tests."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

from modgraph_cli.depgraph import MetadataGraph
from modgraph_cli.models import PackageRecord
from modgraph_cli.workspace import GoWorkspaceView


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point the config file at a temporary location for every test."""
    monkeypatch.setattr("modgraph_cli.config.BASE_DIR", tmp_path / ".modgraph")
    monkeypatch.setattr("modgraph_cli.config.CONFIG_FILE", tmp_path / ".modgraph" / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_workspace_path() -> Path:
    """Get path to the sample Go workspace."""
    return (Path(__file__).parent / "fixtures" / "sample_workspace").resolve()


def _sample_packages(root: Path) -> List[PackageRecord]:
    server_test_id = "example.com/app/server [example.com/app/server.test]"
    return [
        PackageRecord(
            id="example.com/app",
            pkg_path="example.com/app",
            name="main",
            module_path="example.com/app",
            dir=str(root),
            compiled_files=[str(root / "main.go")],
            deps_by_path={"example.com/app/server": "example.com/app/server", "fmt": "fmt"},
        ),
        PackageRecord(
            id="example.com/app/server",
            pkg_path="example.com/app/server",
            name="server",
            module_path="example.com/app",
            dir=str(root / "server"),
            compiled_files=[str(root / "server" / "server.go")],
            deps_by_path={
                "errors": "errors",
                "example.com/util/log": "example.com/util/log",
                "net/http": "net/http",
            },
        ),
        PackageRecord(
            id=server_test_id,
            pkg_path="example.com/app/server",
            name="server",
            module_path="example.com/app",
            compiled_files=[str(root / "server" / "server.go")],
            deps_by_path={"errors": "errors", "net/http": "net/http", "testing": "testing"},
            for_test="example.com/app/server",
        ),
        PackageRecord(
            id="example.com/app/server_test [example.com/app/server.test]",
            pkg_path="example.com/app/server_test",
            name="server_test",
            module_path="example.com/app",
            deps_by_path={"example.com/app/server": server_test_id, "testing": "testing"},
            for_test="example.com/app/server",
        ),
        PackageRecord(
            id="example.com/app/internal/store",
            pkg_path="example.com/app/internal/store",
            name="store",
            module_path="example.com/app",
            deps_by_path={"golang.org/x/sync/errgroup": "golang.org/x/sync/errgroup"},
        ),
        PackageRecord(
            id="example.com/app/server/admin",
            pkg_path="example.com/app/server/admin",
            name="admin",
            module_path="example.com/app",
            deps_by_path={"example.com/app/server": "example.com/app/server"},
        ),
        PackageRecord(
            id="example.com/util/log",
            pkg_path="example.com/util/log",
            name="log",
            module_path="example.com/util",
            module_version="v2.0.0",
            deps_by_path={"fmt": "fmt"},
        ),
        PackageRecord(
            id="golang.org/x/sync/errgroup",
            pkg_path="golang.org/x/sync/errgroup",
            name="errgroup",
            module_path="golang.org/x/sync",
            module_version="v0.7.0",
        ),
        PackageRecord(id="errors", pkg_path="errors", name="errors"),
        PackageRecord(id="fmt", pkg_path="fmt", name="fmt", deps_by_path={"io": "io"}),
        PackageRecord(id="io", pkg_path="io", name="io"),
        PackageRecord(
            id="net/http",
            pkg_path="net/http",
            name="http",
            deps_by_path={"errors": "errors", "io": "io"},
        ),
        PackageRecord(id="testing", pkg_path="testing", name="testing"),
    ]


@pytest.fixture
def sample_graph(sample_workspace_path: Path) -> MetadataGraph:
    """Metadata graph matching the sample workspace."""
    return MetadataGraph(_sample_packages(sample_workspace_path))


@pytest.fixture
def sample_view(sample_workspace_path: Path, sample_graph: MetadataGraph) -> GoWorkspaceView:
    """A view over the sample workspace that never runs the go toolchain."""
    return GoWorkspaceView(sample_workspace_path, metadata=sample_graph)


@pytest.fixture
def go_list_file(temp_dir: Path, sample_workspace_path: Path) -> Path:
    """Sample metadata saved the way ``go list -json`` prints it."""
    objects = [
        {
            "ImportPath": "example.com/app",
            "Name": "main",
            "Dir": str(sample_workspace_path),
            "GoFiles": ["main.go"],
            "Imports": ["example.com/app/server"],
            "Module": {"Path": "example.com/app", "Main": True},
        },
        {
            "ImportPath": "example.com/app/server",
            "Name": "server",
            "Dir": str(sample_workspace_path / "server"),
            "GoFiles": ["server.go"],
            "Imports": ["errors", "net/http"],
            "Module": {"Path": "example.com/app", "Main": True},
        },
        {"ImportPath": "errors", "Name": "errors", "Standard": True},
        {"ImportPath": "net/http", "Name": "http", "Standard": True, "Imports": ["errors"]},
    ]
    path = temp_dir / "golist.json"
    path.write_text("\n".join(json.dumps(obj, indent="\t") for obj in objects), encoding="utf-8")
    return path


@pytest.fixture
def write_go_mod(temp_dir: Path):
    """Write a go.mod with *content* into ``temp_dir/<subdir>`` and return its path."""
    def _write(content: str, subdir: str = "") -> Path:
        directory = temp_dir / subdir if subdir else temp_dir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "go.mod"
        path.write_text(content, encoding="utf-8")
        return path
    return _write
