"""
Line-to-function lookup for source file snapshots.

Every supported language gets one FunctionIndex implementation, chosen by
file extension. Files in other languages still count as changed files; they
just never contribute function names.
"""

import ast
from pathlib import Path
from typing import Protocol

from .config import PYTHON_EXTENSIONS
from .errors import StructuralAnalysisError


class FunctionIndex(Protocol):
    def function_at(self, line: int) -> str | None:
        ...


class NullFunctionIndex:
    """Index for files that cannot be analyzed: no line belongs to a function"""

    def function_at(self, line: int) -> str | None:
        return None


class _ScopeCollector(ast.NodeVisitor):
    """Collect (first_line, last_line, qualname) for every function and lambda"""

    def __init__(self):
        self.scopes = []
        self._path = []

    def visit_ClassDef(self, node):
        self._path.append(node.name)
        self.generic_visit(node)
        self._path.pop()

    def _visit_function(self, node):
        qualname = '.'.join(self._path + [node.name])
        self.scopes.append((node.lineno, node.end_lineno, qualname))
        self._path.extend([node.name, '<locals>'])
        self.generic_visit(node)
        del self._path[-2:]

    visit_FunctionDef = _visit_function
    visit_AsyncFunctionDef = _visit_function

    def visit_Lambda(self, node):
        # Anonymous: lines inside it belong to no function
        self.scopes.append((node.lineno, node.end_lineno, None))
        self.generic_visit(node)


class PythonFunctionIndex:
    """
    Maps physical lines of a Python module to the innermost enclosing
    function's qualified name (``Class.method``, ``outer.<locals>.inner``).

    Decorator lines and class bodies outside methods map to None.
    """

    def __init__(self, source: str | bytes, filename: str = '<unknown>'):
        try:
            tree = ast.parse(source, filename=filename)
        except (SyntaxError, ValueError) as e:
            raise StructuralAnalysisError(f"cannot parse {filename}: {e}") from e

        collector = _ScopeCollector()
        collector.visit(tree)

        # Scopes arrive in pre-order, so nested ones overwrite their parents
        self._owners = {}
        for first, last, qualname in collector.scopes:
            for line in range(first, last + 1):
                self._owners[line] = qualname

    def function_at(self, line: int) -> str | None:
        return self._owners.get(line)


def function_index_for(path, source: str | bytes) -> FunctionIndex:
    """Build the index implementation matching the file's extension"""
    if Path(path).suffix.lower() in PYTHON_EXTENSIONS:
        return PythonFunctionIndex(source, filename=str(path))
    return NullFunctionIndex()


def load_function_index(path) -> FunctionIndex:
    """Read a file from disk and index it; raises StructuralAnalysisError"""
    path = Path(path)
    if path.suffix.lower() not in PYTHON_EXTENSIONS:
        return NullFunctionIndex()
    # Bytes, so ast.parse honours a PEP 263 coding cookie
    try:
        source = path.read_bytes()
    except OSError as e:
        raise StructuralAnalysisError(f"cannot read {path}: {e}") from e
    return function_index_for(path, source)
