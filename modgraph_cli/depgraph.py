"""Package-level dependency graph: metadata index and traversal.

The :class:`MetadataGraph` indexes the packages reported by the build system
(``go list -deps -test -json``) by id, by import path and by importer. The
traversal helpers walk it to produce dependency and dependent edges.
"""

from __future__ import annotations

import json
import logging
import os
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from .errors import BackendError, PackageNotFoundError
from .models import DependencyEdge, DependencyGraphResult, DependentEdge, PackageRecord
from .modules import is_path_within

logger = logging.getLogger(__name__)

DEFAULT_TRUSTED_PREFIXES = ("golang.org/x/",)
DEFAULT_TEST_SUFFIX = "_test"


# ===================================================================
# Metadata graph
# ===================================================================

class MetadataGraph:
    """Read-only index over a workspace's package records."""

    def __init__(self, packages: Iterable[PackageRecord]) -> None:
        self.packages: Dict[str, PackageRecord] = {}
        for pkg in packages:
            self.packages[pkg.id] = pkg

        by_path: Dict[str, List[PackageRecord]] = defaultdict(list)
        imported_by: Dict[str, List[PackageRecord]] = defaultdict(list)
        for pkg_id in sorted(self.packages):
            pkg = self.packages[pkg_id]
            by_path[pkg.pkg_path].append(pkg)
            for dep_id in pkg.deps_by_path.values():
                imported_by[dep_id].append(pkg)

        # First variant is the best one: the plain package before its test variants.
        for variants in by_path.values():
            variants.sort(key=lambda p: (p.is_test_variant(), p.id))

        self.for_package_path: Dict[str, List[PackageRecord]] = dict(by_path)
        self.imported_by: Dict[str, List[PackageRecord]] = dict(imported_by)

    def __len__(self) -> int:
        return len(self.packages)

    def lookup(self, pkg_path: str) -> PackageRecord:
        """Return the best variant for *pkg_path* or raise PackageNotFoundError."""
        variants = self.for_package_path.get(pkg_path)
        if not variants:
            raise PackageNotFoundError(pkg_path)
        return variants[0]

    @classmethod
    def from_go_list(cls, text: str) -> "MetadataGraph":
        """Build a graph from the JSON stream printed by ``go list -json``."""
        return cls(_package_from_go_list(obj) for obj in _iter_json_objects(text))


def _iter_json_objects(text: str) -> Iterable[dict]:
    decoder = json.JSONDecoder()
    idx = 0
    end = len(text)
    while True:
        while idx < end and text[idx].isspace():
            idx += 1
        if idx >= end:
            return
        try:
            obj, idx = decoder.raw_decode(text, idx)
        except json.JSONDecodeError as exc:
            raise BackendError(f"malformed go list output: {exc}") from exc
        yield obj


def _strip_variant(pkg_id: str) -> str:
    """``example.com/a [example.com/a.test]`` -> ``example.com/a``."""
    return pkg_id.split(" [", 1)[0]


def _package_from_go_list(obj: dict) -> PackageRecord:
    pkg_id = obj.get("ImportPath", "")
    pkg_dir = obj.get("Dir", "")
    files = obj.get("CompiledGoFiles") or obj.get("GoFiles") or []
    module = obj.get("Module") or {}

    deps: Dict[str, str] = {}
    for dep_id in obj.get("Imports") or []:
        if dep_id == "C":
            continue
        deps[_strip_variant(dep_id)] = dep_id

    return PackageRecord(
        id=pkg_id,
        pkg_path=_strip_variant(pkg_id),
        name=obj.get("Name", ""),
        module_path=module.get("Path", ""),
        module_version=module.get("Version", ""),
        dir=pkg_dir,
        compiled_files=[f if os.path.isabs(f) else os.path.join(pkg_dir, f) for f in files],
        deps_by_path=deps,
        for_test=obj.get("ForTest", ""),
    )


# ===================================================================
# Classification
# ===================================================================

def is_stdlib_package(pkg_path: str, trusted_prefixes: Sequence[str] = DEFAULT_TRUSTED_PREFIXES) -> bool:
    """Return True for standard-library packages.

    A path whose first segment has no dot (``net/http``, ``fmt``) is standard
    library, as is anything under a trusted extension prefix.
    """
    first_segment = pkg_path.split("/", 1)[0]
    if "." not in first_segment:
        return True
    return any(pkg_path.startswith(prefix) for prefix in trusted_prefixes)


def is_external_package(pkg_path: str, main_module_path: str, is_stdlib: bool) -> bool:
    if is_stdlib or not main_module_path:
        return False
    return not is_path_within(pkg_path, main_module_path)


# ===================================================================
# Traversal
# ===================================================================

def collect_dependencies(
    pkg: PackageRecord,
    graph: MetadataGraph,
    main_module_path: str = "",
    include_transitive: bool = False,
    max_depth: int = 0,
    trusted_prefixes: Sequence[str] = DEFAULT_TRUSTED_PREFIXES,
) -> List[DependencyEdge]:
    """Walk *pkg*'s imports depth-first and return one edge per package.

    A package reachable along several paths is reported once, at the depth
    where the walk first meets it, and is not expanded again. Depths are
    shallowest among siblings, not across the whole graph: a package met
    deep under an early import keeps that depth even when a later subtree
    reaches it in fewer steps. ``max_depth`` of zero or less means
    unbounded.
    """
    deps: List[DependencyEdge] = []
    seen: Set[str] = {pkg.pkg_path}
    _walk(pkg, graph, main_module_path, include_transitive, max_depth, trusted_prefixes, deps, seen, 0)
    return deps


def _walk(
    pkg: PackageRecord,
    graph: MetadataGraph,
    main_module_path: str,
    include_transitive: bool,
    max_depth: int,
    trusted_prefixes: Sequence[str],
    deps: List[DependencyEdge],
    seen: Set[str],
    depth: int,
) -> None:
    if max_depth > 0 and depth >= max_depth:
        return

    # All new imports of this package are claimed before any is expanded.
    claimed: List[Tuple[str, PackageRecord]] = []
    for dep_path in sorted(pkg.deps_by_path):
        if dep_path in seen:
            continue
        dep_pkg = graph.packages.get(pkg.deps_by_path[dep_path])
        if dep_pkg is None:
            logger.debug("Import %s of %s is missing from the metadata graph", dep_path, pkg.id)
            continue
        if dep_pkg.is_intermediate_test_variant():
            continue
        seen.add(dep_path)
        claimed.append((dep_path, dep_pkg))

    for dep_path, dep_pkg in claimed:
        is_stdlib = is_stdlib_package(dep_path, trusted_prefixes)
        deps.append(DependencyEdge(
            path=dep_path,
            name=dep_pkg.name,
            module_path=dep_pkg.module_path,
            is_stdlib=is_stdlib,
            is_external=is_external_package(dep_path, main_module_path, is_stdlib),
            depth=depth,
        ))

        if include_transitive:
            _walk(dep_pkg, graph, main_module_path, include_transitive, max_depth,
                  trusted_prefixes, deps, seen, depth + 1)


def collect_dependents(
    pkg: PackageRecord,
    graph: MetadataGraph,
    test_suffix: str = DEFAULT_TEST_SUFFIX,
) -> List[DependentEdge]:
    """Return the packages importing *pkg*, one edge per import path.

    A package and its same-path test variant count once.
    """
    dependents: List[DependentEdge] = []
    seen: Set[str] = set()
    for importer in graph.imported_by.get(pkg.id, []):
        if importer.is_intermediate_test_variant() or importer.pkg_path in seen:
            continue
        seen.add(importer.pkg_path)
        dependents.append(DependentEdge(
            path=importer.pkg_path,
            name=importer.name,
            module_path=importer.module_path,
            is_test=importer.name.endswith(test_suffix),
        ))
    return dependents


def _summarize(deps: List[DependencyEdge], dependents: List[DependentEdge]) -> str:
    stdlib = sum(1 for d in deps if d.is_stdlib)
    external = sum(1 for d in deps if d.is_external)
    internal = len(deps) - stdlib - external
    tests = sum(1 for d in dependents if d.is_test)
    return (
        f"{len(deps)} dependencies ({stdlib} stdlib, {external} external, {internal} internal); "
        f"{len(dependents)} dependents ({tests} test)"
    )


def resolve_dependency_graph(
    graph: MetadataGraph,
    package_path: str,
    main_module_path: str = "",
    include_transitive: bool = False,
    max_depth: int = 0,
    trusted_prefixes: Sequence[str] = DEFAULT_TRUSTED_PREFIXES,
    test_suffix: str = DEFAULT_TEST_SUFFIX,
) -> DependencyGraphResult:
    pkg = graph.lookup(package_path)
    deps = collect_dependencies(
        pkg,
        graph,
        main_module_path=main_module_path,
        include_transitive=include_transitive,
        max_depth=max_depth,
        trusted_prefixes=trusted_prefixes,
    )
    dependents = collect_dependents(pkg, graph, test_suffix=test_suffix)
    return DependencyGraphResult(
        package_path=package_path,
        package_name=pkg.name,
        dependencies=deps,
        dependents=dependents,
        total_dependencies=len(deps),
        total_dependents=len(dependents),
        summary=_summarize(deps, dependents),
    )
