"""Workspace views and snapshots.

A :class:`View` hands out :class:`Snapshot` objects: consistent, read-only
pictures of a workspace's manifests, package metadata and symbols. Callers
always take a snapshot through ``with view.snapshot() as snap:`` so it is
released on every exit path.

:class:`GoWorkspaceView` is the on-disk implementation: manifests are read
from ``go.mod``/``go.work``, package metadata comes from ``go list`` (or a
saved copy of its output) and symbols from :class:`GoSymbolExtractor`.
"""

from __future__ import annotations

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from .depgraph import MetadataGraph
from .errors import BackendError
from .extractor import GoSymbolExtractor
from .gomod import parse_go_mod, parse_go_work
from .models import ManifestDeclaration, PackageRecord, Symbol

logger = logging.getLogger(__name__)

GO_LIST_ARGS = ["list", "-e", "-json", "-deps", "-test", "./..."]


# ===================================================================
# Abstract interfaces
# ===================================================================

class Snapshot(ABC):
    """Read-only, point-in-time view of a workspace."""

    @abstractmethod
    def manifest_files(self) -> List[str]:
        """Manifest paths, main module first."""
        ...

    @abstractmethod
    def read_manifest(self, path: str) -> ManifestDeclaration:
        ...

    @abstractmethod
    def metadata_graph(self) -> MetadataGraph:
        ...

    @abstractmethod
    def document_symbols(self, file_path: str, include_bodies: bool = False) -> List[Symbol]:
        ...

    def package_docs(self, pkg: PackageRecord) -> str:
        return ""


class View(ABC):
    """Source of snapshots for one workspace."""

    @abstractmethod
    def acquire(self) -> Snapshot:
        ...

    def release(self, snapshot: Snapshot) -> None:
        pass

    @contextmanager
    def snapshot(self) -> Iterator[Snapshot]:
        snap = self.acquire()
        try:
            yield snap
        finally:
            self.release(snap)


# ===================================================================
# Go workspace on disk
# ===================================================================

def _find_upwards(start: Path, name: str) -> Optional[Path]:
    for directory in [start, *start.parents]:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def discover_manifests(root: Path) -> List[str]:
    """Return the ``go.mod`` files of the workspace containing *root*.

    With a ``go.work`` every ``use`` directory contributes its ``go.mod``; the
    module enclosing *root* (if any) is moved to the front as the main module.
    Otherwise the nearest enclosing ``go.mod`` is the only manifest.
    """
    root = root.resolve()
    nearest_mod = _find_upwards(root, "go.mod")
    work_file = _find_upwards(root, "go.work")

    if work_file is None:
        return [str(nearest_mod)] if nearest_mod is not None else []

    try:
        uses = parse_go_work(work_file.read_text(encoding="utf-8"), str(work_file))
    except OSError as exc:
        logger.warning("Could not read %s: %s", work_file, exc)
        uses = []

    files: List[str] = []
    for use in uses:
        mod_file = Path(os.path.normpath(work_file.parent / use)) / "go.mod"
        if str(mod_file) not in files:
            files.append(str(mod_file))

    if nearest_mod is not None and str(nearest_mod) in files:
        files.remove(str(nearest_mod))
        files.insert(0, str(nearest_mod))
    return files


def workspace_root(start: Path) -> Path:
    """Directory ``go list`` must run in to see the whole workspace.

    That is the ``go.work`` directory when there is one, else the directory
    of the enclosing ``go.mod``, else *start* itself.
    """
    start = start.resolve()
    work_file = _find_upwards(start, "go.work")
    if work_file is not None:
        return work_file.parent
    mod_file = _find_upwards(start, "go.mod")
    if mod_file is not None:
        return mod_file.parent
    return start


def run_go_list(workdir: Path, go_binary: str = "go") -> str:
    """Run ``go list`` in *workdir* and return its JSON stream."""
    cmd = [go_binary, *GO_LIST_ARGS]
    logger.debug("Running %s in %s", " ".join(cmd), workdir)
    try:
        proc = subprocess.run(cmd, cwd=str(workdir), capture_output=True, text=True, check=False)
    except FileNotFoundError as exc:
        raise BackendError(f"go toolchain not found: {go_binary}") from exc
    if proc.returncode != 0 and not proc.stdout.strip():
        raise BackendError(f"go list failed: {proc.stderr.strip()}")
    if proc.stderr.strip():
        logger.warning("go list reported errors: %s", proc.stderr.strip())
    return proc.stdout


class GoSnapshot(Snapshot):
    def __init__(self, view: "GoWorkspaceView") -> None:
        self.view = view
        self._manifests: Optional[List[str]] = None
        self._graph: Optional[MetadataGraph] = view.metadata

    def manifest_files(self) -> List[str]:
        if self._manifests is None:
            self._manifests = discover_manifests(self.view.root)
        return list(self._manifests)

    def read_manifest(self, path: str) -> ManifestDeclaration:
        text = Path(path).read_text(encoding="utf-8")
        return parse_go_mod(text, path)

    def metadata_graph(self) -> MetadataGraph:
        if self._graph is None:
            if self.view.metadata_file is not None:
                text = Path(self.view.metadata_file).read_text(encoding="utf-8")
            else:
                text = run_go_list(workspace_root(self.view.root), self.view.go_binary)
            self._graph = MetadataGraph.from_go_list(text)
            logger.debug("Loaded metadata for %d package variant(s)", len(self._graph))
        return self._graph

    def document_symbols(self, file_path: str, include_bodies: bool = False) -> List[Symbol]:
        return self.view.extractor.extract(file_path, include_bodies=include_bodies)

    def package_docs(self, pkg: PackageRecord) -> str:
        for file_path in pkg.compiled_files:
            try:
                doc = self.view.extractor.package_doc(file_path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping %s: %s", file_path, exc)
                continue
            if doc:
                return doc
        return ""


class GoWorkspaceView(View):
    """A Go module or ``go.work`` workspace rooted at *root*.

    *metadata* (a prebuilt graph) or *metadata_file* (saved ``go list -json``
    output) replace the ``go list`` invocation.
    """

    def __init__(
        self,
        root: Path,
        metadata: Optional[MetadataGraph] = None,
        metadata_file: Optional[Path] = None,
        go_binary: str = "go",
        extractor: Optional[GoSymbolExtractor] = None,
    ) -> None:
        self.root = Path(root)
        self.metadata = metadata
        self.metadata_file = metadata_file
        self.go_binary = go_binary
        self.extractor = extractor or GoSymbolExtractor()

    def acquire(self) -> Snapshot:
        return GoSnapshot(self)
