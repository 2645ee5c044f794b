"""Line-oriented parser for ``go.mod`` and ``go.work`` manifests.

Only the directives that affect module resolution are kept:

- ``module``  -- the module identity
- ``go``      -- minimum language version
- ``require`` -- required modules, with the ``// indirect`` marker
- ``replace`` -- module-to-module and module-to-directory substitutions
- ``use``     -- workspace members (``go.work`` only)

Everything else (``exclude``, ``retract``, ``toolchain`` ...) is accepted and
ignored. Both the single-line and the parenthesised block forms are supported.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple

from .errors import ManifestParseError
from .models import ManifestDeclaration, Replacement, Requirement

logger = logging.getLogger(__name__)

IGNORED_VERBS = {"exclude", "retract", "toolchain", "godebug", "tool", "ignore"}


def is_local_path(path: str) -> bool:
    """Return True if a replace target names a directory instead of a module.

    Local targets start with ``.`` or ``/``, or carry a drive-letter prefix
    such as ``C:``.
    """
    if not path:
        return False
    if path.startswith(".") or path.startswith("/"):
        return True
    return len(path) > 1 and path[1] == ":"


# ===================================================================
# Tokenizer
# ===================================================================

def _tokenize(line: str, path: str, lineno: int) -> Tuple[List[str], str]:
    """Split *line* into tokens and return them with the trailing comment."""
    tokens: List[str] = []
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch.isspace():
            i += 1
        elif line.startswith("//", i):
            return tokens, line[i + 2:].strip()
        elif line.startswith("=>", i):
            tokens.append("=>")
            i += 2
        elif ch in "()":
            tokens.append(ch)
            i += 1
        elif ch == '"':
            i += 1
            buf: List[str] = []
            while i < n and line[i] != '"':
                if line[i] == "\\" and i + 1 < n:
                    i += 1
                buf.append(line[i])
                i += 1
            if i >= n:
                raise ManifestParseError(path, lineno, "unterminated quoted string")
            tokens.append("".join(buf))
            i += 1
        elif ch == "`":
            end = line.find("`", i + 1)
            if end < 0:
                raise ManifestParseError(path, lineno, "unterminated raw string")
            tokens.append(line[i + 1:end])
            i = end + 1
        else:
            start = i
            while (
                i < n
                and not line[i].isspace()
                and line[i] not in '()"`'
                and not line.startswith("//", i)
                and not line.startswith("=>", i)
            ):
                i += 1
            tokens.append(line[start:i])
    return tokens, ""


def _iter_statements(text: str, path: str) -> Iterator[Tuple[str, List[str], str, int]]:
    """Yield ``(verb, args, comment, lineno)`` with block forms flattened."""
    block: Optional[str] = None
    block_line = 0
    for lineno, raw in enumerate(text.splitlines(), start=1):
        tokens, comment = _tokenize(raw, path, lineno)
        if not tokens:
            continue

        if block is not None:
            if tokens == [")"]:
                block = None
                continue
            yield block, tokens, comment, lineno
            continue

        verb, args = tokens[0], tokens[1:]
        if args == ["(", ")"]:
            continue
        if args == ["("]:
            block = verb
            block_line = lineno
            continue
        yield verb, args, comment, lineno

    if block is not None:
        raise ManifestParseError(path, block_line, f"unterminated {block} block")


def _is_indirect(comment: str) -> bool:
    return comment == "indirect" or comment.startswith("indirect;")


# ===================================================================
# go.mod
# ===================================================================

def _parse_replace(args: List[str], path: str, lineno: int) -> Replacement:
    if "=>" not in args:
        raise ManifestParseError(path, lineno, "replace directive is missing '=>'")
    arrow = args.index("=>")
    old, new = args[:arrow], args[arrow + 1:]
    if len(old) not in (1, 2) or len(new) not in (1, 2):
        raise ManifestParseError(path, lineno, "usage: replace module/path [v1.2.3] => other/module v1.4.5 | local/dir")
    if len(new) == 1 and not is_local_path(new[0]):
        raise ManifestParseError(
            path, lineno, f"replacement module without version must be directory path (rooted or starting with . or ..): {new[0]}"
        )
    return Replacement(
        old_path=old[0],
        old_version=old[1] if len(old) == 2 else "",
        new_path=new[0],
        new_version=new[1] if len(new) == 2 else "",
    )


def parse_go_mod(text: str, path: str = "go.mod") -> ManifestDeclaration:
    """Parse ``go.mod`` *text* into a :class:`ManifestDeclaration`."""
    module_path = ""
    go_version = ""
    requires: List[Requirement] = []
    replaces: List[Replacement] = []

    for verb, args, comment, lineno in _iter_statements(text, path):
        if verb == "module":
            if module_path:
                raise ManifestParseError(path, lineno, "repeated module statement")
            if len(args) != 1:
                raise ManifestParseError(path, lineno, "usage: module module/path")
            module_path = args[0]
        elif verb == "go":
            if len(args) != 1:
                raise ManifestParseError(path, lineno, "usage: go 1.23")
            go_version = args[0]
        elif verb == "require":
            if len(args) != 2:
                raise ManifestParseError(path, lineno, "usage: require module/path v1.2.3")
            requires.append(Requirement(path=args[0], version=args[1], indirect=_is_indirect(comment)))
        elif verb == "replace":
            replaces.append(_parse_replace(args, path, lineno))
        elif verb in IGNORED_VERBS:
            continue
        else:
            logger.debug("%s:%d: ignoring unknown directive %r", path, lineno, verb)

    if not module_path:
        raise ManifestParseError(path, 1, "no module declaration")

    return ManifestDeclaration(
        path=path,
        module_path=module_path,
        go_version=go_version,
        requires=requires,
        replaces=replaces,
    )


# ===================================================================
# go.work
# ===================================================================

def parse_go_work(text: str, path: str = "go.work") -> List[str]:
    """Return the ``use`` directories declared in a ``go.work`` file."""
    uses: List[str] = []
    for verb, args, _comment, lineno in _iter_statements(text, path):
        if verb == "use":
            if len(args) != 1:
                raise ManifestParseError(path, lineno, "usage: use local/dir")
            uses.append(args[0])
    return uses
