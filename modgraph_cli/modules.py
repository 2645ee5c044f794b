"""Build the classified, ordered module list of a workspace.

Modules are split into two groups:

- **internal** -- the main module, its path descendants, workspace members and
  anything replaced by a local directory (monorepo layouts).
- **external** -- every other requirement.

Internal modules are ordered by how much of their path they share with the
main module so that sibling modules end up next to each other; external
modules are ordered alphabetically.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .models import (
    ModuleListResult,
    ModulePackagesResult,
    ModuleRecord,
    ModuleSummary,
    PackageInfo,
    PackageRecord,
    ResolvedManifests,
)

logger = logging.getLogger(__name__)


# ===================================================================
# Path predicates
# ===================================================================

def is_path_within(path: str, root: str) -> bool:
    """Return True if *path* equals *root* or is a ``/``-delimited descendant.

    ``foo/bar/baz`` is within ``foo/bar``; ``foo/bar2`` is not.
    """
    if not root:
        return False
    if path == root:
        return True
    return path.startswith(root) and path[len(root)] == "/"


def is_internal(module: ModuleRecord, root_module_path: str) -> bool:
    if module.main:
        return True
    if is_path_within(module.path, root_module_path):
        return True
    return bool(module.file_path)


def common_prefix_length(a: str, b: str) -> int:
    limit = min(len(a), len(b))
    for i in range(limit):
        if a[i] != b[i]:
            return i
    return limit


def sort_modules_by_overlap(modules: List[ModuleRecord], main_module_path: str) -> List[ModuleRecord]:
    """Return *modules* with the main module first, then by prefix overlap.

    Non-main modules sort by descending common-prefix length with
    *main_module_path*, ties broken alphabetically.
    """
    main = [m for m in modules if m.main]
    rest = [m for m in modules if not m.main]
    rest.sort(key=lambda m: (-common_prefix_length(main_module_path, m.path), m.path))
    return main + rest


# ===================================================================
# Module list
# ===================================================================

def collect_modules(resolved: ResolvedManifests, direct_only: bool = True) -> List[ModuleRecord]:
    """Flatten *resolved* into module records in discovery order.

    Module-to-module replacements add a record for the new module carrying
    ``replaces``; the superseded record is kept alongside it.
    """
    modules: List[ModuleRecord] = [ModuleRecord(path=resolved.main_module_path, main=True)]
    for member_path in resolved.members:
        modules.append(ModuleRecord(path=member_path))

    for req in resolved.requirements:
        if direct_only and req.indirect:
            continue
        modules.append(ModuleRecord(path=req.path, version=req.version, indirect=req.indirect))

    known = {m.path for m in modules}
    for old_path, (new_path, new_version) in resolved.module_replaces.items():
        if new_path in known:
            continue
        modules.append(ModuleRecord(path=new_path, version=new_version, replaces=old_path))
        known.add(new_path)

    for module in modules:
        module.file_path = resolved.local_replaces.get(module.path, "")
    return modules


def build_module_list(resolved: ResolvedManifests, direct_only: bool = True) -> ModuleListResult:
    modules = collect_modules(resolved, direct_only=direct_only)
    root = resolved.main_module_path

    internal: List[ModuleRecord] = []
    external: List[ModuleRecord] = []
    for module in modules:
        if is_internal(module, root):
            internal.append(module)
        else:
            external.append(module)

    internal = sort_modules_by_overlap(internal, root)
    external.sort(key=lambda m: m.path)

    logger.debug("Module list for %s: %d internal, %d external", root, len(internal), len(external))
    return ModuleListResult(
        summary=ModuleSummary(
            root_module=root,
            total_modules=len(modules),
            internal_count=len(internal),
            external_count=len(external),
        ),
        internal_modules=internal,
        external_modules=external,
    )


# ===================================================================
# Packages of a module
# ===================================================================

def _has_internal_segment(pkg_path: str) -> bool:
    return "internal" in pkg_path.split("/")


def _is_nested(pkg_path: str, module_path: str) -> bool:
    if pkg_path == module_path:
        return False
    relative = pkg_path[len(module_path) + 1:] if is_path_within(pkg_path, module_path) else pkg_path
    return "/" in relative


def list_module_packages(
    for_package_path: Dict[str, List[PackageRecord]],
    module_path: str,
    exclude_tests: bool = False,
    exclude_internal: bool = False,
    top_level_only: bool = False,
    test_suffix: str = "_test",
    docs_for: Optional[Callable[[PackageRecord], str]] = None,
) -> ModulePackagesResult:
    """List the packages declared by *module_path*, best variant per path.

    When *docs_for* is given it is called for each kept package to fill in
    its documentation.
    """
    packages: List[PackageInfo] = []
    for pkg_path in sorted(for_package_path):
        variants = for_package_path[pkg_path]
        if not variants:
            continue
        pkg = variants[0]
        if pkg.module_path != module_path:
            continue
        if exclude_tests and pkg.name.endswith(test_suffix):
            continue
        if exclude_internal and _has_internal_segment(pkg_path):
            continue
        if top_level_only and _is_nested(pkg_path, module_path):
            continue

        info = PackageInfo(name=pkg.name, path=pkg_path)
        if docs_for is not None:
            info.docs = docs_for(pkg)
        packages.append(info)

    return ModulePackagesResult(module_path=module_path, packages=packages)
