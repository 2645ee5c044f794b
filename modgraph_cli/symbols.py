"""Exported-symbol listing and exact name/receiver filtering."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from .errors import ModGraphError
from .models import PackageRecord, PackageSymbolsResult, Symbol, SymbolFilter, SymbolKind

logger = logging.getLogger(__name__)

DEFAULT_SYMBOL_LIMIT = 200


def is_exported(name: str) -> bool:
    """Return True if *name* starts with an upper-case letter.

    Method names of the form ``(Recv).Name`` are judged by ``Name``.
    """
    if not name:
        return False
    if name[0] == "(":
        close = name.find(").")
        if close < 0:
            return False
        name = name[close + 2:]
        if not name:
            return False
    return "A" <= name[0] <= "Z"


def _matches(symbol: Symbol, flt: SymbolFilter) -> bool:
    if symbol.name != flt.name:
        return False
    if symbol.kind is SymbolKind.METHOD and flt.receiver:
        return symbol.receiver == flt.receiver
    return True


def filter_symbols(symbols: Sequence[Symbol], filters: Sequence[SymbolFilter]) -> List[Symbol]:
    """Return the symbols matched by any of *filters*, in input order.

    Names match exactly. For methods a non-empty filter receiver must equal
    the symbol's receiver (``*Buffer`` and ``Buffer`` differ); an empty one
    matches every receiver. Receivers are ignored for other kinds.

    *filters* must be non-empty; callers reject empty requests upfront.
    """
    return [sym for sym in symbols if any(_matches(sym, flt) for flt in filters)]


def collect_package_symbols(
    snapshot,
    pkg: PackageRecord,
    include_docs: bool = False,
    include_bodies: bool = False,
) -> List[Symbol]:
    """Gather the exported top-level symbols of every file in *pkg*.

    Files the snapshot cannot read or parse are skipped.
    """
    symbols: List[Symbol] = []
    for file_path in pkg.compiled_files:
        try:
            file_symbols = snapshot.document_symbols(file_path, include_bodies=include_bodies)
        except (OSError, UnicodeDecodeError, ModGraphError) as exc:
            logger.warning("Skipping %s: %s", file_path, exc)
            continue

        for sym in file_symbols:
            if not is_exported(sym.name):
                continue
            symbols.append(replace(
                sym,
                package_path=pkg.pkg_path,
                doc=sym.doc if include_docs else "",
                body=sym.body if include_bodies else "",
            ))
    return symbols


def limit_symbols(package_path: str, symbols: List[Symbol], limit: int = DEFAULT_SYMBOL_LIMIT) -> PackageSymbolsResult:
    total = len(symbols)
    if limit <= 0 or total <= limit:
        return PackageSymbolsResult(
            package_path=package_path,
            symbols=symbols,
            total_count=total,
            returned=total,
        )
    return PackageSymbolsResult(
        package_path=package_path,
        symbols=symbols[:limit],
        total_count=total,
        returned=limit,
        truncated=True,
        hint=(
            f"Large package: {total} symbols found (showing first {limit}). "
            "Use 'mg detail' with symbol filters for specific symbols."
        ),
    )
