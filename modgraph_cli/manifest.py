"""Resolve a workspace's manifests into requirements and replace directives."""

from __future__ import annotations

import logging
import os
from typing import List, Set

from .errors import ModGraphError, NoManifestError
from .gomod import is_local_path
from .models import ManifestDeclaration, ResolvedManifests

logger = logging.getLogger(__name__)


def load_manifests(snapshot) -> List[ManifestDeclaration]:
    """Read and parse every manifest visible in *snapshot*.

    A manifest that cannot be read or parsed is skipped so that one broken
    workspace member does not hide the others. The main module's manifest
    comes first.
    """
    files = snapshot.manifest_files()
    if not files:
        raise NoManifestError()

    declarations: List[ManifestDeclaration] = []
    for manifest_file in files:
        try:
            declarations.append(snapshot.read_manifest(manifest_file))
        except (OSError, UnicodeDecodeError, ModGraphError) as exc:
            logger.warning("Skipping manifest %s: %s", manifest_file, exc)

    if not declarations:
        raise NoManifestError("no parseable go.mod files found in view")
    return declarations


def _manifest_dir(declaration: ManifestDeclaration) -> str:
    return os.path.dirname(declaration.path) or "."


def resolve_manifests(declarations: List[ManifestDeclaration]) -> ResolvedManifests:
    """Merge manifest declarations into a single resolution state.

    The first declaration is the main module. Requirements are deduplicated
    by path in declaration order, so the main module's entries win over any
    later manifest's entries for the same path.
    """
    if not declarations:
        raise NoManifestError()

    main = declarations[0]
    resolved = ResolvedManifests(
        main_module_path=main.module_path,
        main_module_dir=_manifest_dir(main),
    )
    workspace_paths: Set[str] = {decl.module_path for decl in declarations}
    seen: Set[str] = set()

    for decl in declarations:
        mod_dir = _manifest_dir(decl)

        for repl in decl.replaces:
            if is_local_path(repl.new_path):
                target = repl.new_path
                if target.startswith("."):
                    target = os.path.normpath(os.path.join(mod_dir, target))
                resolved.local_replaces[repl.old_path] = target
            else:
                resolved.module_replaces[repl.old_path] = (repl.new_path, repl.new_version)

        # Workspace modules always resolve to their own directory.
        resolved.local_replaces[decl.module_path] = mod_dir
        if decl.module_path != resolved.main_module_path:
            resolved.members.setdefault(decl.module_path, mod_dir)

        for req in decl.requires:
            if req.path in seen or req.path in workspace_paths:
                continue
            seen.add(req.path)
            resolved.requirements.append(req)

    logger.debug(
        "Resolved %d manifest(s): %d requirement(s), %d local and %d module replace(s)",
        len(declarations),
        len(resolved.requirements),
        len(resolved.local_replaces),
        len(resolved.module_replaces),
    )
    return resolved


def main_module_path(snapshot) -> str:
    """Return the module path declared by the first parseable manifest."""
    return load_manifests(snapshot)[0].module_path
