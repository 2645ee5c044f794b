"""Core data models shared by the resolvers, navigators and formatters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


# ===================================================================
# Manifests
# ===================================================================

@dataclass
class Requirement:
    path: str
    version: str
    indirect: bool = False


@dataclass
class Replacement:
    old_path: str
    new_path: str
    old_version: str = ""
    new_version: str = ""


@dataclass
class ManifestDeclaration:
    """Parsed contents of one module manifest (``go.mod``)."""

    path: str
    module_path: str
    go_version: str = ""
    requires: List[Requirement] = field(default_factory=list)
    replaces: List[Replacement] = field(default_factory=list)


@dataclass
class ResolvedManifests:
    main_module_path: str
    main_module_dir: str
    requirements: List[Requirement] = field(default_factory=list)
    # module path -> local directory
    local_replaces: Dict[str, str] = field(default_factory=dict)
    # old module path -> (new path, new version)
    module_replaces: Dict[str, tuple] = field(default_factory=dict)
    # workspace members other than the main module: path -> directory
    members: Dict[str, str] = field(default_factory=dict)


# ===================================================================
# Modules
# ===================================================================

@dataclass
class ModuleRecord:
    path: str
    version: str = ""
    main: bool = False
    indirect: bool = False
    replaces: str = ""
    file_path: str = ""


@dataclass
class ModuleSummary:
    root_module: str
    total_modules: int
    internal_count: int
    external_count: int


@dataclass
class ModuleListResult:
    summary: ModuleSummary
    internal_modules: List[ModuleRecord]
    external_modules: List[ModuleRecord]


@dataclass
class PackageInfo:
    name: str
    path: str
    docs: str = ""


@dataclass
class ModulePackagesResult:
    module_path: str
    packages: List[PackageInfo]


# ===================================================================
# Packages and dependency edges
# ===================================================================

@dataclass
class PackageRecord:
    """A package as reported by the build system's metadata graph.

    ``id`` is unique per variant; ``pkg_path`` is shared between a package and
    its test variants. ``deps_by_path`` maps each directly imported package
    path to the id of the variant actually imported.
    """

    id: str
    pkg_path: str
    name: str
    module_path: str = ""
    module_version: str = ""
    dir: str = ""
    compiled_files: List[str] = field(default_factory=list)
    deps_by_path: Dict[str, str] = field(default_factory=dict)
    for_test: str = ""

    def is_test_variant(self) -> bool:
        return bool(self.for_test)

    def is_intermediate_test_variant(self) -> bool:
        return (
            self.for_test != ""
            and self.for_test != self.pkg_path
            and self.for_test + "_test" != self.pkg_path
        )


@dataclass
class DependencyEdge:
    path: str
    name: str
    module_path: str
    is_stdlib: bool
    is_external: bool
    depth: int


@dataclass
class DependentEdge:
    path: str
    name: str
    module_path: str
    is_test: bool


@dataclass
class DependencyGraphResult:
    package_path: str
    package_name: str
    dependencies: List[DependencyEdge]
    dependents: List[DependentEdge]
    total_dependencies: int
    total_dependents: int
    summary: str = ""


# ===================================================================
# Symbols
# ===================================================================

class SymbolKind(str, Enum):
    FIELD = "field"
    METHOD = "method"
    FUNCTION = "function"
    STRUCT = "struct"
    INTERFACE = "interface"
    VARIABLE = "var"
    CONSTANT = "const"
    TYPE = "type"


@dataclass
class Symbol:
    name: str
    kind: SymbolKind
    signature: str
    file_path: str
    line: int
    receiver: str = ""
    parent: str = ""
    package_path: str = ""
    doc: str = ""
    body: str = ""


@dataclass
class SymbolFilter:
    name: str
    receiver: str = ""


@dataclass
class PackageSymbolsResult:
    package_path: str
    symbols: List[Symbol]
    total_count: int
    returned: int
    truncated: bool = False
    hint: str = ""


@dataclass
class SymbolDetailResult:
    package_path: str
    symbols: List[Symbol]
