"""Python scope extractor using the built-in ast module. Always available, no extra deps."""

from __future__ import annotations

import ast
import textwrap

from namewise.exceptions import TokenizationError
from namewise.parser.models import Scope, ScopeKind

_FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)
_IMPLICIT_ARGS = {"self", "cls"}


def _segment(source: str, node: ast.AST) -> str:
    segment = ast.get_source_segment(source, node, padded=True)
    return textwrap.dedent(segment) if segment else ""


def _annotation(node: ast.AST | None) -> str | None:
    if node is None:
        return None
    try:
        return ast.unparse(node)
    except Exception:
        return None


class _BindingCollector(ast.NodeVisitor):
    """Collect names bound directly in one function or module body.

    Nested functions, classes and lambdas are not entered; they get their
    own scopes. The first binding of a name decides its node type.
    """

    def __init__(self) -> None:
        self.bindings: dict[str, tuple[str, int, str | None]] = {}
        self._statement = "Module"

    def bind(self, name: str, node_type: str, line: int, type_name: str | None = None) -> None:
        if name in _IMPLICIT_ARGS or name == "_":
            return
        self.bindings.setdefault(name, (node_type, line, type_name))

    def collect_body(self, body: list[ast.stmt]) -> None:
        for stmt in body:
            self.visit(stmt)

    def generic_visit(self, node: ast.AST) -> None:
        if isinstance(node, ast.stmt):
            previous = self._statement
            self._statement = type(node).__name__
            super().generic_visit(node)
            self._statement = previous
        else:
            super().generic_visit(node)

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        for dec in node.decorator_list:
            self.visit(dec)

    visit_AsyncFunctionDef = visit_FunctionDef  # type: ignore[assignment]

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        for dec in node.decorator_list:
            self.visit(dec)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        return

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        if isinstance(node.target, ast.Name):
            self.bind(node.target.id, "AnnAssign", node.lineno, _annotation(node.annotation))
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if isinstance(node.ctx, ast.Store):
            self.bind(node.id, self._statement, node.lineno)

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.name:
            self.bind(node.name, "ExceptHandler", node.lineno, _annotation(node.type))
        self.generic_visit(node)


class PythonScopeExtractor:
    """Extract (Scope, identifier name) pairs from Python source.

    Local variables and arguments are scoped to their enclosing function,
    module-level variables to the module. Method and class names are
    scoped to the body that declares them.
    """

    def __init__(self, variables: bool = True, methods: bool = True, types: bool = True) -> None:
        self.variables = variables
        self.methods = methods
        self.types = types

    def extract(self, source: str, file_path: str = "") -> list[tuple[Scope, str]]:
        """Extract identifier scopes.

        Args:
            source: Python source text.
            file_path: Recorded on each scope for reporting.

        Returns:
            (scope, name) pairs in a deterministic order.

        Raises:
            TokenizationError: If the source does not parse.
        """
        try:
            tree = ast.parse(source, filename=file_path or "<unknown>")
        except (SyntaxError, ValueError) as e:
            raise TokenizationError(f"Cannot parse {file_path or 'source'}: {e}") from e

        results: list[tuple[Scope, str]] = []
        if self.variables:
            results.extend(self._module_variables(tree, source, file_path))
            for node in ast.walk(tree):
                if isinstance(node, _FUNCTION_NODES):
                    results.extend(self._function_variables(node, source, file_path))
        if self.methods or self.types:
            results.extend(self._declarations(tree, source, file_path))

        results.sort(key=lambda pair: (pair[0].sort_key(), pair[1]))
        return results

    def _module_variables(
        self, tree: ast.Module, source: str, file_path: str
    ) -> list[tuple[Scope, str]]:
        collector = _BindingCollector()
        collector.collect_body(tree.body)
        return [
            (
                Scope(
                    code=source,
                    node_type=node_type,
                    parent_node_type="Module",
                    kind=ScopeKind.VARIABLE,
                    type_name=type_name,
                    file_path=file_path,
                    line=line,
                ),
                name,
            )
            for name, (node_type, line, type_name) in collector.bindings.items()
        ]

    def _function_variables(
        self, func: ast.FunctionDef | ast.AsyncFunctionDef, source: str, file_path: str
    ) -> list[tuple[Scope, str]]:
        code = _segment(source, func)
        if not code:
            return []
        parent = type(func).__name__
        collector = _BindingCollector()

        args = func.args
        for arg in [*args.posonlyargs, *args.args, *args.kwonlyargs]:
            collector.bind(arg.arg, "arg", arg.lineno, _annotation(arg.annotation))
        for arg in (args.vararg, args.kwarg):
            if arg is not None:
                collector.bind(arg.arg, "arg", arg.lineno, _annotation(arg.annotation))
        collector.collect_body(func.body)

        return [
            (
                Scope(
                    code=code,
                    node_type=node_type,
                    parent_node_type=parent,
                    kind=ScopeKind.VARIABLE,
                    type_name=type_name,
                    file_path=file_path,
                    line=line,
                ),
                name,
            )
            for name, (node_type, line, type_name) in collector.bindings.items()
        ]

    def _declarations(
        self, tree: ast.Module, source: str, file_path: str
    ) -> list[tuple[Scope, str]]:
        results: list[tuple[Scope, str]] = []
        stack: list[tuple[ast.AST, str]] = [(tree, source)]
        while stack:
            parent, code = stack.pop()
            for child in ast.iter_child_nodes(parent):
                if isinstance(child, _FUNCTION_NODES):
                    if self.methods:
                        scope = self._declaration_scope(child, parent, code, file_path)
                        results.append((scope, child.name))
                    stack.append((child, _segment(source, child)))
                elif isinstance(child, ast.ClassDef):
                    if self.types:
                        scope = self._declaration_scope(child, parent, code, file_path)
                        results.append((scope, child.name))
                    stack.append((child, _segment(source, child)))
                else:
                    stack.append((child, code))
        return results

    @staticmethod
    def _declaration_scope(
        node: ast.FunctionDef | ast.AsyncFunctionDef | ast.ClassDef,
        parent: ast.AST,
        code: str,
        file_path: str,
    ) -> Scope:
        if isinstance(node, ast.ClassDef):
            kind = ScopeKind.TYPE
            type_name = None
        else:
            kind = ScopeKind.METHOD
            type_name = _annotation(node.returns)
        return Scope(
            code=code,
            node_type=type(node).__name__,
            parent_node_type=type(parent).__name__,
            kind=kind,
            type_name=type_name,
            file_path=file_path,
            line=node.lineno,
        )
