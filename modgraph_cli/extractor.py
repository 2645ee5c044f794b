"""Top-level Go symbol extraction built on Tree-sitter.

Produces the flat list of declarations a document-symbol request would
return for one file: functions, methods (with their receiver), types,
constants and variables, each with a signature, its leading doc comment and,
on request, the function body.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, List, Optional

from .models import Symbol, SymbolKind

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


def _text(node: Any) -> str:
    return node.text.decode("utf-8")


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _comment_text(raw: str) -> str:
    if raw.startswith("//"):
        line = raw[2:]
        return line[1:] if line.startswith(" ") else line
    if raw.startswith("/*"):
        return raw[2:-2].strip()
    return raw


class GoSymbolExtractor:
    """Extract top-level symbols from Go source with ``tree-sitter-go``."""

    def __init__(self) -> None:
        self._parser: Optional[Any] = None
        self._init_parser()

    def _init_parser(self) -> None:
        try:
            import tree_sitter_go  # type: ignore[import-untyped]
            from tree_sitter import Language, Parser as TSParser  # type: ignore[import-untyped]
        except ImportError:
            logger.warning(
                "tree-sitter-go is not installed -- symbol extraction unavailable. "
                "Install with: pip install tree-sitter tree-sitter-go"
            )
            return
        self._parser = TSParser(Language(tree_sitter_go.language()))

    @property
    def available(self) -> bool:
        return self._parser is not None

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def extract(
        self,
        file_path: str,
        source: Optional[str] = None,
        include_bodies: bool = False,
    ) -> List[Symbol]:
        if self._parser is None:
            return []
        if source is None:
            source = Path(file_path).read_text(encoding="utf-8")

        tree = self._parser.parse(source.encode("utf-8"))
        symbols: List[Symbol] = []
        for child in tree.root_node.children:
            if child.type == "function_declaration":
                sym = self._function(child, file_path, include_bodies)
            elif child.type == "method_declaration":
                sym = self._method(child, file_path, include_bodies)
            elif child.type == "type_declaration":
                symbols.extend(self._types(child, file_path))
                continue
            elif child.type in ("const_declaration", "var_declaration"):
                symbols.extend(self._values(child, file_path))
                continue
            else:
                continue
            if sym is not None:
                symbols.append(sym)
        return symbols

    def package_doc(self, file_path: str, source: Optional[str] = None) -> str:
        """Return the comment attached to the file's ``package`` clause."""
        if self._parser is None:
            return ""
        if source is None:
            source = Path(file_path).read_text(encoding="utf-8")
        tree = self._parser.parse(source.encode("utf-8"))
        for child in tree.root_node.children:
            if child.type == "package_clause":
                return self._doc(child)
        return ""

    # ------------------------------------------------------------------
    # Functions and methods
    # ------------------------------------------------------------------

    @staticmethod
    def _func_signature(node: Any) -> str:
        parts = ["func"]
        type_params = node.child_by_field_name("type_parameters")
        if type_params is not None:
            parts.append(_text(type_params))
        params = node.child_by_field_name("parameters")
        parts.append(_text(params) if params is not None else "()")
        signature = "".join(parts)
        result = node.child_by_field_name("result")
        if result is not None:
            signature += " " + _text(result)
        return _collapse(signature)

    @staticmethod
    def _body(node: Any) -> str:
        body = node.child_by_field_name("body")
        if body is None:
            return ""
        text = _text(body).strip()
        if text.startswith("{") and text.endswith("}"):
            text = text[1:-1]
        return text.strip()

    def _function(self, node: Any, file_path: str, include_bodies: bool) -> Optional[Symbol]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return Symbol(
            name=_text(name_node),
            kind=SymbolKind.FUNCTION,
            signature=self._func_signature(node),
            file_path=file_path,
            line=node.start_point[0] + 1,
            doc=self._doc(node),
            body=self._body(node) if include_bodies else "",
        )

    def _method(self, node: Any, file_path: str, include_bodies: bool) -> Optional[Symbol]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return Symbol(
            name=_text(name_node),
            kind=SymbolKind.METHOD,
            receiver=self._receiver_type(node),
            signature=self._func_signature(node),
            file_path=file_path,
            line=node.start_point[0] + 1,
            doc=self._doc(node),
            body=self._body(node) if include_bodies else "",
        )

    @staticmethod
    def _receiver_type(node: Any) -> str:
        """``func (s *Server) Start()`` -> ``*Server``."""
        receiver = node.child_by_field_name("receiver")
        if receiver is None:
            return ""
        for param in receiver.named_children:
            if param.type == "parameter_declaration":
                type_node = param.child_by_field_name("type")
                if type_node is not None:
                    return _collapse(_text(type_node))
        return ""

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def _types(self, decl: Any, file_path: str) -> List[Symbol]:
        symbols: List[Symbol] = []
        for spec in decl.named_children:
            if spec.type not in ("type_spec", "type_alias"):
                continue
            name_node = spec.child_by_field_name("name")
            type_node = spec.child_by_field_name("type")
            if name_node is None or type_node is None:
                continue

            if type_node.type == "struct_type":
                kind, signature = SymbolKind.STRUCT, "struct{...}"
            elif type_node.type == "interface_type":
                kind, signature = SymbolKind.INTERFACE, "interface{...}"
            else:
                kind, signature = SymbolKind.TYPE, _collapse(_text(type_node))

            symbols.append(Symbol(
                name=_text(name_node),
                kind=kind,
                signature=signature,
                file_path=file_path,
                line=spec.start_point[0] + 1,
                doc=self._doc(spec) or self._doc(decl),
            ))
        return symbols

    # ------------------------------------------------------------------
    # Constants and variables
    # ------------------------------------------------------------------

    def _values(self, decl: Any, file_path: str) -> List[Symbol]:
        kind = SymbolKind.CONSTANT if decl.type == "const_declaration" else SymbolKind.VARIABLE
        specs: List[Any] = []
        for child in decl.named_children:
            if child.type in ("const_spec", "var_spec"):
                specs.append(child)
            elif child.type == "var_spec_list":
                specs.extend(c for c in child.named_children if c.type == "var_spec")

        symbols: List[Symbol] = []
        for spec in specs:
            type_node = spec.child_by_field_name("type")
            value_node = spec.child_by_field_name("value")
            if type_node is not None:
                signature = _collapse(_text(type_node))
            elif value_node is not None:
                signature = "= " + _collapse(_text(value_node))
            else:
                signature = ""
            doc = self._doc(spec) or self._doc(decl)

            for name_node in spec.children_by_field_name("name"):
                name = _text(name_node)
                if name == "_":
                    continue
                symbols.append(Symbol(
                    name=name,
                    kind=kind,
                    signature=signature,
                    file_path=file_path,
                    line=name_node.start_point[0] + 1,
                    doc=doc,
                ))
        return symbols

    # ------------------------------------------------------------------
    # Doc comments
    # ------------------------------------------------------------------

    @staticmethod
    def _doc(node: Any) -> str:
        """Collect the comment block that ends on the line above *node*."""
        lines: List[str] = []
        expected_row = node.start_point[0] - 1
        sibling = node.prev_sibling
        while sibling is not None and sibling.type == "comment" and sibling.end_point[0] == expected_row:
            lines.append(_comment_text(_text(sibling)))
            expected_row = sibling.start_point[0] - 1
            sibling = sibling.prev_sibling
        lines.reverse()
        return "\n".join(lines)
