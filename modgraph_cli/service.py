"""Workspace queries: one method per operation exposed to callers."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .config_manager import Settings
from .depgraph import resolve_dependency_graph
from .errors import InvalidRequestError, NoManifestError
from .manifest import load_manifests, main_module_path, resolve_manifests
from .models import (
    DependencyGraphResult,
    ModuleListResult,
    ModulePackagesResult,
    PackageSymbolsResult,
    SymbolDetailResult,
    SymbolFilter,
)
from .modules import build_module_list, list_module_packages
from .symbols import collect_package_symbols, filter_symbols, limit_symbols
from .workspace import View

logger = logging.getLogger(__name__)


class WorkspaceService:
    """Runs structural queries against snapshots of a single workspace."""

    def __init__(self, view: View, settings: Optional[Settings] = None):
        self.view = view
        self.settings = settings or Settings()

    @staticmethod
    def _main_module_path(snap, required: bool = True) -> str:
        """Main module path; empty when optional and no manifest is usable."""
        try:
            return main_module_path(snap)
        except NoManifestError:
            if required:
                raise
            logger.warning("No usable go.mod; external dependencies cannot be told apart")
            return ""

    def list_modules(self, direct_only: bool = True) -> ModuleListResult:
        with self.view.snapshot() as snap:
            resolved = resolve_manifests(load_manifests(snap))
        return build_module_list(resolved, direct_only=direct_only)

    def list_module_packages(
        self,
        module_path: str = "",
        exclude_tests: bool = False,
        exclude_internal: bool = False,
        top_level_only: bool = False,
        include_docs: bool = False,
    ) -> ModulePackagesResult:
        with self.view.snapshot() as snap:
            graph = snap.metadata_graph()
            target = module_path or main_module_path(snap)
            return list_module_packages(
                graph.for_package_path,
                target,
                exclude_tests=exclude_tests,
                exclude_internal=exclude_internal,
                top_level_only=top_level_only,
                test_suffix=self.settings.test_suffix,
                docs_for=snap.package_docs if include_docs else None,
            )

    def resolve_dependency_graph(
        self,
        package_path: str = "",
        include_transitive: bool = False,
        max_depth: int = 0,
    ) -> DependencyGraphResult:
        with self.view.snapshot() as snap:
            graph = snap.metadata_graph()
            main_path = self._main_module_path(snap, required=not package_path)
            return resolve_dependency_graph(
                graph,
                package_path or main_path,
                main_module_path=main_path,
                include_transitive=include_transitive,
                max_depth=max_depth,
                trusted_prefixes=self.settings.trusted_stdlib_prefixes,
                test_suffix=self.settings.test_suffix,
            )

    def list_package_symbols(
        self,
        package_path: str,
        include_docs: bool = False,
        include_bodies: bool = False,
    ) -> PackageSymbolsResult:
        with self.view.snapshot() as snap:
            pkg = snap.metadata_graph().lookup(package_path)
            symbols = collect_package_symbols(snap, pkg, include_docs, include_bodies)
        return limit_symbols(package_path, symbols, self.settings.symbol_limit)

    def get_package_symbol_detail(
        self,
        package_path: str,
        filters: Sequence[SymbolFilter],
        include_docs: bool = False,
        include_bodies: bool = False,
    ) -> SymbolDetailResult:
        if not filters:
            raise InvalidRequestError(
                "symbol filters are required for a symbol detail query; "
                "use list_package_symbols to get all symbols in a package"
            )
        with self.view.snapshot() as snap:
            pkg = snap.metadata_graph().lookup(package_path)
            symbols = collect_package_symbols(snap, pkg, include_docs, include_bodies)
        matched = filter_symbols(symbols, filters)
        logger.debug("%d of %d symbols in %s matched", len(matched), len(symbols), package_path)
        return SymbolDetailResult(package_path=package_path, symbols=matched)
