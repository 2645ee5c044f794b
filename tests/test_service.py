"""Tests for WorkspaceService against the sample workspace."""

from pathlib import Path

import pytest

from modgraph_cli.config_manager import Settings
from modgraph_cli.errors import InvalidRequestError, NoManifestError, PackageNotFoundError
from modgraph_cli.models import SymbolFilter, SymbolKind
from modgraph_cli.service import WorkspaceService
from modgraph_cli.workspace import GoWorkspaceView


@pytest.fixture
def service(sample_view: GoWorkspaceView) -> WorkspaceService:
    return WorkspaceService(sample_view)


@pytest.fixture
def needs_extractor(sample_view: GoWorkspaceView):
    if not sample_view.extractor.available:
        pytest.skip("tree-sitter-go is not installed")


class TestListModules:
    """Tests for WorkspaceService.list_modules."""

    def test_sample_workspace(self, service: WorkspaceService, sample_workspace_path: Path):
        result = service.list_modules()

        assert result.summary.root_module == "example.com/app"
        assert [(m.path, m.file_path) for m in result.internal_modules] == [
            ("example.com/app", str(sample_workspace_path)),
            ("example.com/tools", str(sample_workspace_path / "tools")),
        ]
        assert [m.path for m in result.external_modules] == [
            "example.com/util",
            "github.com/new/api",
            "github.com/old/api",
        ]

    def test_all_includes_indirect(self, service: WorkspaceService):
        result = service.list_modules(direct_only=False)
        assert "example.com/lib" in [m.path for m in result.external_modules]

    def test_undecodable_member_manifest_skipped(self, temp_dir: Path, write_go_mod):
        write_go_mod("module example.com/app\n", "app")
        bad_dir = temp_dir / "bad"
        bad_dir.mkdir()
        (bad_dir / "go.mod").write_bytes(b"module example.com/bad\xff\xfe\n")
        (temp_dir / "go.work").write_text("use (\n\t./app\n\t./bad\n)\n", encoding="utf-8")

        result = WorkspaceService(GoWorkspaceView(temp_dir / "app")).list_modules()

        assert result.summary.root_module == "example.com/app"
        assert [m.path for m in result.internal_modules] == ["example.com/app"]

    def test_no_manifest(self, temp_dir: Path, sample_graph):
        service = WorkspaceService(GoWorkspaceView(temp_dir, metadata=sample_graph))
        with pytest.raises(NoManifestError):
            service.list_modules()


class TestListModulePackages:
    """Tests for WorkspaceService.list_module_packages."""

    def test_defaults_to_main_module(self, service: WorkspaceService):
        result = service.list_module_packages(exclude_tests=True, exclude_internal=True)
        assert result.module_path == "example.com/app"
        assert [p.path for p in result.packages] == [
            "example.com/app",
            "example.com/app/server",
            "example.com/app/server/admin",
        ]

    def test_explicit_module(self, service: WorkspaceService):
        result = service.list_module_packages("example.com/util")
        assert [p.name for p in result.packages] == ["log"]

    def test_include_docs(self, service: WorkspaceService, needs_extractor):
        result = service.list_module_packages(top_level_only=True, exclude_tests=True, include_docs=True)
        docs = {p.path: p.docs for p in result.packages}
        assert docs["example.com/app"] == "Command app starts the example server."
        assert docs["example.com/app/server"] == "Package server runs the HTTP front end."


class TestResolveDependencyGraph:
    """Tests for WorkspaceService.resolve_dependency_graph."""

    def test_defaults_to_main_package(self, service: WorkspaceService):
        result = service.resolve_dependency_graph()
        assert result.package_path == "example.com/app"
        assert [d.path for d in result.dependencies] == ["example.com/app/server", "fmt"]

    def test_server_dependencies(self, service: WorkspaceService):
        result = service.resolve_dependency_graph("example.com/app/server")
        flags = {d.path: (d.is_stdlib, d.is_external) for d in result.dependencies}

        assert flags == {
            "errors": (True, False),
            "example.com/util/log": (False, True),
            "net/http": (True, False),
        }
        assert [d.path for d in result.dependents] == ["example.com/app", "example.com/app/server/admin"]

    def test_transitive_with_depth(self, service: WorkspaceService):
        result = service.resolve_dependency_graph("example.com/app", include_transitive=True, max_depth=2)
        assert [(d.path, d.depth) for d in result.dependencies] == [
            ("example.com/app/server", 0),
            ("errors", 1),
            ("example.com/util/log", 1),
            ("net/http", 1),
            ("fmt", 0),
        ]

    def test_trusted_prefixes_from_settings(self, sample_view: GoWorkspaceView):
        service = WorkspaceService(sample_view, Settings(trusted_stdlib_prefixes=[]))
        result = service.resolve_dependency_graph("example.com/app/internal/store")
        (dep,) = result.dependencies
        assert not dep.is_stdlib
        assert dep.is_external

    def test_explicit_package_without_manifest(self, temp_dir: Path, sample_graph):
        service = WorkspaceService(GoWorkspaceView(temp_dir, metadata=sample_graph))
        result = service.resolve_dependency_graph("example.com/app/server")
        assert not any(d.is_external for d in result.dependencies)

        with pytest.raises(NoManifestError):
            service.resolve_dependency_graph()

    def test_unknown_package(self, service: WorkspaceService):
        with pytest.raises(PackageNotFoundError):
            service.resolve_dependency_graph("example.com/app/nope")


class TestSymbols:
    """Tests for the symbol queries."""

    def test_list_package_symbols(self, service: WorkspaceService, needs_extractor):
        result = service.list_package_symbols("example.com/app/server")

        assert [s.name for s in result.symbols] == [
            "DefaultPort", "ErrClosed", "Server", "Handler", "Option", "New", "Start", "Name",
        ]
        assert not result.truncated
        assert all(s.doc == "" and s.body == "" for s in result.symbols)

    def test_list_package_symbols_truncated(self, sample_view: GoWorkspaceView, needs_extractor):
        service = WorkspaceService(sample_view, Settings(symbol_limit=3))
        result = service.list_package_symbols("example.com/app/server")

        assert result.truncated
        assert result.total_count == 8
        assert result.returned == 3

    def test_symbol_detail(self, service: WorkspaceService, needs_extractor):
        result = service.get_package_symbol_detail(
            "example.com/app/server",
            [SymbolFilter(name="Start", receiver="*Server"), SymbolFilter(name="New")],
            include_docs=True,
        )
        assert [(s.name, s.kind) for s in result.symbols] == [
            ("New", SymbolKind.FUNCTION),
            ("Start", SymbolKind.METHOD),
        ]
        assert result.symbols[1].doc == "Start begins serving."

    def test_symbol_detail_wrong_receiver(self, service: WorkspaceService, needs_extractor):
        result = service.get_package_symbol_detail(
            "example.com/app/server", [SymbolFilter(name="Name", receiver="*Server")],
        )
        assert result.symbols == []

    def test_symbol_detail_requires_filters(self, service: WorkspaceService):
        with pytest.raises(InvalidRequestError):
            service.get_package_symbol_detail("example.com/app/server", [])

    def test_unknown_package(self, service: WorkspaceService):
        with pytest.raises(PackageNotFoundError):
            service.list_package_symbols("example.com/nope")
