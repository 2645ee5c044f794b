"""Plain-text and JSON renderings of query results.

Every formatter is a projection of its result: it keeps the result's order
and never filters or re-sorts.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, List

from .models import (
    DependencyGraphResult,
    ModuleListResult,
    ModulePackagesResult,
    PackageSymbolsResult,
    SymbolDetailResult,
    SymbolKind,
)


def _truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _content_suffix(include_docs: bool, include_bodies: bool) -> str:
    if include_docs and include_bodies:
        return " with docs and bodies"
    if include_docs:
        return " with docs"
    if include_bodies:
        return " with bodies"
    return ""


def format_modules_list(result: ModuleListResult) -> str:
    summary = result.summary
    lines: List[str] = [
        "Module Summary",
        f"  Root: {summary.root_module}",
        f"  Total: {summary.total_modules} (Internal: {summary.internal_count}, External: {summary.external_count})",
        "",
        f"Internal Modules ({len(result.internal_modules)}):",
    ]
    for mod in result.internal_modules:
        line = f"  [MAIN] {mod.path}" if mod.main else f"  {mod.path}"
        if mod.version:
            line += f" @ {mod.version}"
        if mod.file_path:
            line += f" -> {mod.file_path}"
        if mod.replaces:
            line += f" (replaces {mod.replaces})"
        lines.append(line)

    lines.append("")
    lines.append(f"External Modules ({len(result.external_modules)}):")
    for mod in result.external_modules:
        line = f"  {mod.path}"
        if mod.version:
            line += f" @ {mod.version}"
        if mod.indirect:
            line += " (indirect)"
        if mod.replaces:
            line += f" (replaces {mod.replaces})"
        lines.append(line)
    return "\n".join(lines) + "\n"


def format_module_packages(result: ModulePackagesResult) -> str:
    lines = [f"Module: {result.module_path} ({len(result.packages)} packages):"]
    for pkg in result.packages:
        line = f"  {pkg.path} ({pkg.name})"
        if pkg.docs:
            line += f" - {_truncate(pkg.docs, 80)}"
        lines.append(line)
    return "\n".join(lines) + "\n"


def format_dependency_graph(result: DependencyGraphResult) -> str:
    lines = [f"Package: {result.package_path} ({result.package_name})", ""]

    if result.total_dependencies:
        lines.append(f"Dependencies ({result.total_dependencies}):")
        for dep in result.dependencies:
            line = f"  {'  ' * dep.depth}{dep.path} ({dep.name})"
            if dep.is_stdlib:
                line += " [stdlib]"
            if dep.is_external:
                line += " [external]"
            if dep.module_path:
                line += f" from {dep.module_path}"
            lines.append(line)
    else:
        lines.append("Dependencies: None")
    lines.append("")

    if result.total_dependents:
        lines.append(f"Imported By ({result.total_dependents}):")
        for dep in result.dependents:
            line = f"  {dep.path} ({dep.name})"
            if dep.is_test:
                line += " [test]"
            if dep.module_path:
                line += f" from {dep.module_path}"
            lines.append(line)
    else:
        lines.append("Imported By: None")
    lines.append("")

    if result.summary:
        lines.append(f"Summary: {result.summary}")
    return "\n".join(lines) + "\n"


def format_symbol_detail(result: SymbolDetailResult, include_docs: bool = False, include_bodies: bool = False) -> str:
    suffix = _content_suffix(include_docs, include_bodies) or " (signatures only)"
    lines = [f"Symbols ({len(result.symbols)}){suffix}:"]
    for sym in result.symbols:
        kind = sym.kind.value
        if sym.kind is SymbolKind.METHOD and sym.receiver:
            lines.append(f"  {kind} ({sym.receiver}).{sym.name} - {sym.signature}")
        else:
            lines.append(f"  {kind} {sym.name} - {sym.signature}")
        if include_docs and sym.doc:
            lines.extend(f"    {doc_line}" for doc_line in sym.doc.split("\n"))
        if include_bodies and sym.body:
            lines.append(f"   = {{ {sym.body} }}")
        if sym.file_path:
            lines.append(f"    at {sym.file_path}:{sym.line}")
        lines.append("")
    return "\n".join(lines) + "\n"


def format_package_symbols(result: PackageSymbolsResult, include_docs: bool = False, include_bodies: bool = False) -> str:
    suffix = _content_suffix(include_docs, include_bodies)
    lines = [f"Package: {result.package_path}{suffix} ({len(result.symbols)} symbols):"]
    for sym in result.symbols:
        line = f"  {sym.kind.value} {sym.name}"
        if sym.receiver:
            line += f" [{sym.receiver}]"
        if sym.signature:
            line += f" - {sym.signature}"
        if include_docs and sym.doc:
            line += f" // {_truncate(sym.doc, 80)}"
        if include_bodies and sym.body:
            line += f" = {_truncate(sym.body, 60)}"
        lines.append(line)
    if result.truncated and result.hint:
        lines.append("")
        lines.append(result.hint)
    return "\n".join(lines) + "\n"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def to_json(result: Any) -> str:
    """Serialise a result dataclass to indented JSON."""
    payload = asdict(result) if is_dataclass(result) else result
    return json.dumps(_plain(payload), indent=2)
