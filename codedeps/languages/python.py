"""Python AST extractors for symbol trees and cross-file references."""

from __future__ import annotations

import ast
import asyncio
from pathlib import Path, PurePosixPath

from codedeps.core.diagnostics import DiagnosticSink, NullDiagnosticSink, Severity
from codedeps.core.exceptions import ExtractionError
from codedeps.core.models import RawReference, SymbolKind, SymbolNode, normalize_path
from codedeps.core.tree import find_enclosing
from codedeps.languages.base import SourceDocument

LANGUAGE_ID = "python"


def _parse(text: str, relative_path: str) -> ast.Module:
    try:
        return ast.parse(text, filename=relative_path)
    except SyntaxError as e:
        raise ExtractionError(f"Syntax error in {relative_path}: {e}") from e


class PythonSymbolExtractor:
    """Builds symbol trees for Python files using the ast module."""

    def supports(self, file: Path) -> bool:
        """Check if this extractor supports the given file."""
        return file.suffix == ".py"

    async def extract_symbol_tree(self, relative_path: str, document: SourceDocument) -> SymbolNode:
        """Parse a Python document into a FILE root with nested symbols."""
        path = normalize_path(relative_path)
        tree = _parse(document.text, path)

        root = SymbolNode(
            name=path,
            kind=SymbolKind.FILE,
            path=path,
            start_line=0,
            end_line=max(document.line_count - 1, 0),
        )
        visitor = _SymbolVisitor(root)
        visitor.visit(tree)
        return root


class _SymbolVisitor(ast.NodeVisitor):
    """AST visitor that nests symbols under the enclosing class or function."""

    def __init__(self, root: SymbolNode) -> None:
        self._stack: list[SymbolNode] = [root]

    def _current(self) -> SymbolNode:
        return self._stack[-1]

    def _add_symbol(self, name: str, node: ast.stmt, kind: SymbolKind) -> SymbolNode:
        """Add a symbol under the current scope (ast lines are 1-based)."""
        start_line = node.lineno - 1
        end_line = (node.end_lineno or node.lineno) - 1
        symbol = SymbolNode(
            name=name,
            kind=kind,
            path=self._stack[0].path,
            start_line=start_line,
            end_line=max(end_line, start_line),
        )
        self._current().add_child(symbol)
        return symbol

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        """Handle class definitions."""
        symbol = self._add_symbol(node.name, node, SymbolKind.CLASS)
        self._stack.append(symbol)
        self.generic_visit(node)
        self._stack.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        """Handle function and method definitions."""
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        """Handle async function definitions."""
        self._visit_function(node)

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        parent = self._current()
        if parent.kind == SymbolKind.CLASS:
            kind = SymbolKind.CONSTRUCTOR if node.name == "__init__" else SymbolKind.METHOD
        else:
            kind = SymbolKind.FUNCTION

        symbol = self._add_symbol(node.name, node, kind)
        self._stack.append(symbol)
        self.generic_visit(node)
        self._stack.pop()

    def visit_Assign(self, node: ast.Assign) -> None:
        """Handle module and class level assignments."""
        if self._current().kind in (SymbolKind.FILE, SymbolKind.CLASS):
            for target in node.targets:
                for name in _target_names(target):
                    self._add_symbol(name, node, self._variable_kind(name))
        self.generic_visit(node)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        """Handle annotated assignments (e.g., x: int = 5)."""
        if self._current().kind in (SymbolKind.FILE, SymbolKind.CLASS):
            if isinstance(node.target, ast.Name):
                self._add_symbol(node.target.id, node, self._variable_kind(node.target.id))
        self.generic_visit(node)

    def _variable_kind(self, name: str) -> SymbolKind:
        if self._current().kind == SymbolKind.CLASS:
            return SymbolKind.FIELD
        return SymbolKind.CONSTANT if name.isupper() else SymbolKind.VARIABLE


def _target_names(target: ast.expr) -> list[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, ast.Tuple):
        return [elt.id for elt in target.elts if isinstance(elt, ast.Name)]
    return []


class PythonReferenceExtractor:
    """Finds imports of other indexed files and the places they are used.

    ``from pkg.mod import Name`` yields one candidate at the import line and
    one per use of ``Name``, each targeting the top-level definition of
    ``Name`` in ``pkg/mod.py``. Importing a module (``import pkg.mod`` or
    ``from pkg import mod``) targets that module's FILE root.
    """

    def __init__(self, root: Path, sink: DiagnosticSink | None = None) -> None:
        self._root = root
        self._sink = sink or NullDiagnosticSink()
        self._definitions: dict[str, dict[str, int]] = {}

    async def extract_references(
        self, document: SourceDocument, root: SymbolNode
    ) -> list[RawReference]:
        # Target lookups stat and read other files
        return await asyncio.to_thread(self._extract, document, root)

    def _extract(self, document: SourceDocument, root: SymbolNode) -> list[RawReference]:
        path = normalize_path(document.relative_path)
        tree = _parse(document.text, path)

        candidates: list[RawReference] = []
        # local name -> (target path, target symbol name, target start line)
        bindings: dict[str, tuple[str, str, int]] = {}

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    target_path = self._resolve_module(alias.name, 0, path)
                    if target_path is not None and target_path != path:
                        candidates.append(
                            self._candidate(root, path, node.lineno - 1, (target_path, target_path, 0))
                        )
            elif isinstance(node, ast.ImportFrom):
                for alias in node.names:
                    target = self._resolve_imported_name(node.module, node.level, alias.name, path)
                    if target is None or target[0] == path:
                        continue
                    bindings[alias.asname or alias.name] = target
                    candidates.append(self._candidate(root, path, node.lineno - 1, target))

        for node in ast.walk(tree):
            if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load):
                target = bindings.get(node.id)
                if target is not None:
                    candidates.append(self._candidate(root, path, node.lineno - 1, target))

        return candidates

    def _candidate(
        self, root: SymbolNode, path: str, line: int, target: tuple[str, str, int]
    ) -> RawReference:
        enclosing = find_enclosing(root, line) or root
        to_path, to_name, to_line = target
        return RawReference(
            from_symbol_id=enclosing.id,
            from_path=path,
            to_path=to_path,
            to_symbol_name=to_name,
            to_start_line=to_line,
            line_number=line,
        )

    def _resolve_imported_name(
        self, module: str | None, level: int, name: str, current: str
    ) -> tuple[str, str, int] | None:
        if name == "*":
            return None

        module_path = self._resolve_module(module or "", level, current)
        if module_path is not None:
            line = self._module_definitions(module_path).get(name)
            if line is not None:
                return (module_path, name, line)

        dotted = f"{module}.{name}" if module else name
        submodule_path = self._resolve_module(dotted, level, current)
        if submodule_path is not None:
            return (submodule_path, submodule_path, 0)
        return None

    def _resolve_module(self, module: str, level: int, current: str) -> str | None:
        """Map a (possibly relative) module name to an indexed file path."""
        parts = [p for p in module.split(".") if p]
        if level:
            base = PurePosixPath(current).parent
            for _ in range(level - 1):
                base = base.parent
            parts = [p for p in base.parts if p != "."] + parts
        if not parts:
            return None

        stem = "/".join(parts)
        for candidate in (f"{stem}.py", f"{stem}/__init__.py", f"src/{stem}.py", f"src/{stem}/__init__.py"):
            if (self._root / candidate).is_file():
                return candidate
        return None

    def _module_definitions(self, relative_path: str) -> dict[str, int]:
        """Top-level names defined in a module, with 0-based start lines."""
        if relative_path in self._definitions:
            return self._definitions[relative_path]

        definitions: dict[str, int] = {}
        try:
            text = (self._root / relative_path).read_text(encoding="utf-8")
            tree = _parse(text, relative_path)
        except (OSError, UnicodeDecodeError, ExtractionError) as e:
            self._sink.report(Severity.DEBUG, f"Cannot read definitions of {relative_path}: {e}")
            tree = None

        # Later bindings shadow earlier ones, as at import time
        if tree is not None:
            for node in _module_scope_statements(tree):
                if isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
                    definitions[node.name] = node.lineno - 1
                elif isinstance(node, ast.Assign):
                    for target in node.targets:
                        for name in _target_names(target):
                            definitions[name] = node.lineno - 1
                elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                    definitions[node.target.id] = node.lineno - 1

        self._definitions[relative_path] = definitions
        return definitions


_BLOCK_STATEMENTS = (
    ast.If,
    ast.Try,
    ast.TryStar,
    ast.With,
    ast.AsyncWith,
    ast.For,
    ast.AsyncFor,
    ast.While,
)


def _module_scope_statements(tree: ast.Module) -> list[ast.stmt]:
    """Statements that bind names in the module namespace, in source order.

    Bodies of ``if``, ``try``, ``with`` and loop blocks run at module scope
    too; class and function bodies do not.
    """
    statements: list[ast.stmt] = []
    pending: list[ast.AST] = list(tree.body)
    while pending:
        node = pending.pop()
        if isinstance(node, _BLOCK_STATEMENTS):
            for name in ("body", "orelse", "finalbody", "handlers"):
                pending.extend(getattr(node, name, []))
        elif isinstance(node, ast.ExceptHandler):
            pending.extend(node.body)
        elif isinstance(node, ast.stmt):
            statements.append(node)
    statements.sort(key=lambda n: (n.lineno, n.col_offset))
    return statements
