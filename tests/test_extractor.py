"""Tests for Tree-sitter Go symbol extraction."""

from pathlib import Path

import pytest

from modgraph_cli.extractor import GoSymbolExtractor
from modgraph_cli.models import SymbolKind


@pytest.fixture(scope="module")
def extractor() -> GoSymbolExtractor:
    ext = GoSymbolExtractor()
    if not ext.available:
        pytest.skip("tree-sitter-go is not installed")
    return ext


@pytest.fixture
def server_file(sample_workspace_path: Path) -> str:
    return str(sample_workspace_path / "server" / "server.go")


def test_extracts_top_level_symbols_in_source_order(extractor, server_file):
    symbols = extractor.extract(server_file)
    assert [(s.name, s.kind, s.line) for s in symbols] == [
        ("DefaultPort", SymbolKind.CONSTANT, 10),
        ("ErrClosed", SymbolKind.VARIABLE, 13),
        ("Server", SymbolKind.STRUCT, 16),
        ("Handler", SymbolKind.INTERFACE, 22),
        ("Option", SymbolKind.TYPE, 27),
        ("New", SymbolKind.FUNCTION, 30),
        ("Start", SymbolKind.METHOD, 39),
        ("Name", SymbolKind.METHOD, 44),
        ("helper", SymbolKind.FUNCTION, 48),
    ]


def test_struct_fields_are_not_top_level(extractor, server_file):
    names = [s.name for s in extractor.extract(server_file)]
    assert "Addr" not in names
    assert "Handle" not in names


def test_method_receivers(extractor, server_file):
    methods = {s.name: s for s in extractor.extract(server_file) if s.kind is SymbolKind.METHOD}
    assert methods["Start"].receiver == "*Server"
    assert methods["Name"].receiver == "Server"


def test_signatures(extractor, server_file):
    by_name = {s.name: s for s in extractor.extract(server_file)}
    assert by_name["New"].signature == "func(addr string, opts ...Option) *Server"
    assert by_name["Start"].signature == "func() error"
    assert by_name["Server"].signature == "struct{...}"
    assert by_name["Handler"].signature == "interface{...}"
    assert by_name["Option"].signature == "func(*Server)"
    assert by_name["DefaultPort"].signature == "= 8080"


def test_doc_comments(extractor, server_file):
    by_name = {s.name: s for s in extractor.extract(server_file)}
    assert by_name["New"].doc == "New returns a Server listening on addr."
    assert by_name["Start"].doc == "Start begins serving."
    assert by_name["Server"].doc == "Server serves HTTP requests."
    assert by_name["DefaultPort"].doc == "DefaultPort is the port used when none is configured."
    assert by_name["helper"].doc == ""


def test_bodies_only_on_request(extractor, server_file):
    plain = {s.name: s for s in extractor.extract(server_file)}
    assert plain["Start"].body == ""

    with_bodies = {s.name: s for s in extractor.extract(server_file, include_bodies=True)}
    assert with_bodies["Start"].body == "return http.ListenAndServe(s.Addr, s.handler)"


def test_grouped_declarations(extractor):
    source = (
        "package p\n"
        "\n"
        "const (\n"
        "\tA = 1\n"
        "\tB, _ = 2, 3\n"
        ")\n"
        "\n"
        "var (\n"
        "\tX int\n"
        "\ty = \"s\"\n"
        ")\n"
    )
    symbols = extractor.extract("p.go", source=source)
    assert [(s.name, s.kind, s.line) for s in symbols] == [
        ("A", SymbolKind.CONSTANT, 4),
        ("B", SymbolKind.CONSTANT, 5),
        ("X", SymbolKind.VARIABLE, 9),
        ("y", SymbolKind.VARIABLE, 10),
    ]
    assert symbols[2].signature == "int"


def test_package_doc(extractor, server_file):
    assert extractor.package_doc(server_file) == "Package server runs the HTTP front end."
    assert extractor.package_doc("x.go", source="package x\n") == ""
