"""Grafo de dependencias entre namespaces (C#) y módulos (Python) del proyecto."""

from __future__ import annotations

import pathlib
import re
from dataclasses import dataclass, field

import structlog

from docguard.paths import walk_files

logger = structlog.get_logger(__name__)

_CS_NAMESPACE_RE = re.compile(r"^\s*namespace\s+([\w.]+)", re.MULTILINE)
_CS_USING_RE = re.compile(r"^\s*using\s+(?:static\s+)?([\w.]+)\s*;", re.MULTILINE)
_PY_IMPORT_RE = re.compile(r"^\s*(?:from\s+([\w.]+)\s+import|import\s+([\w.]+))", re.MULTILINE)


@dataclass
class DependencyGraph:
    """Grafo dirigido: una arista A -> B significa que A usa B."""

    edges: dict[str, set[str]] = field(default_factory=dict)

    def add_node(self, node: str) -> None:
        self.edges.setdefault(node, set())

    def add_edge(self, source: str, target: str) -> None:
        if source == target:
            return
        self.add_node(target)
        self.edges.setdefault(source, set()).add(target)

    def find_cycles(self) -> list[list[str]]:
        """DFS con conjuntos visited / on_stack compartidos entre raíces.

        Cada arista de retorno produce un ciclo, expresado como el camino
        desde el nodo repetido hasta volver a él. Lineal en nodos + aristas.
        """
        visited: set[str] = set()
        on_stack: set[str] = set()
        stack: list[str] = []
        cycles: list[list[str]] = []

        def visit(node: str) -> None:
            visited.add(node)
            on_stack.add(node)
            stack.append(node)
            for nxt in sorted(self.edges.get(node, ())):
                if nxt in on_stack:
                    start = stack.index(nxt)
                    cycles.append(stack[start:] + [nxt])
                elif nxt not in visited:
                    visit(nxt)
            stack.pop()
            on_stack.discard(node)

        for node in sorted(self.edges):
            if node not in visited:
                visit(node)
        return cycles


def _python_module_name(rel_path: str) -> str:
    parts = list(pathlib.PurePosixPath(rel_path).with_suffix("").parts)
    if parts and parts[0] == "src":
        parts = parts[1:]
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


def _resolve_python(name: str, modules: set[str]) -> str | None:
    """Resuelve un import al módulo del proyecto más específico que lo contiene."""
    parts = name.split(".")
    while parts:
        candidate = ".".join(parts)
        if candidate in modules:
            return candidate
        parts.pop()
    return None


def build_dependency_graph(
    root: pathlib.Path,
    excluded_dirs: list[str],
    errors: list[str] | None = None,
) -> DependencyGraph:
    """Construye el grafo leyendo directivas using/namespace e imports de Python.

    Archivos ilegibles se registran en ``errors`` y se omiten.
    """
    graph = DependencyGraph()
    cs_sources: dict[str, str] = {}
    py_sources: dict[str, str] = {}

    for file_path in walk_files(root, [".cs", ".py"], excluded_dirs):
        rel_path = file_path.relative_to(root).as_posix()
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("dependency_read_error", path=rel_path, error=str(exc))
            if errors is not None:
                errors.append(f"dependencies:{rel_path}: {exc}")
            continue
        if file_path.suffix.lower() == ".cs":
            cs_sources[rel_path] = text
        else:
            py_sources[rel_path] = text

    # C#: nodos = namespaces declarados en el proyecto
    declared: set[str] = set()
    file_namespaces: dict[str, list[str]] = {}
    for rel_path, text in cs_sources.items():
        names = _CS_NAMESPACE_RE.findall(text)
        file_namespaces[rel_path] = names
        declared.update(names)
    for ns in declared:
        graph.add_node(ns)
    for rel_path, text in cs_sources.items():
        used = [u for u in _CS_USING_RE.findall(text) if u in declared]
        for ns in file_namespaces[rel_path]:
            for target in used:
                graph.add_edge(ns, target)

    # Python: nodos = módulos del proyecto
    modules = {_python_module_name(p): p for p in py_sources}
    module_set = {m for m in modules if m}
    for module in module_set:
        graph.add_node(module)
    for module, rel_path in modules.items():
        if not module:
            continue
        for from_name, import_name in _PY_IMPORT_RE.findall(py_sources[rel_path]):
            target = _resolve_python(from_name or import_name, module_set)
            if target is not None:
                graph.add_edge(module, target)

    logger.debug("dependency_graph_built", nodes=len(graph.edges))
    return graph


def detect_cycles(
    root: pathlib.Path,
    excluded_dirs: list[str],
    errors: list[str] | None = None,
) -> list[str]:
    """Descripciones legibles de cada dependencia cíclica encontrada."""
    graph = build_dependency_graph(root, excluded_dirs, errors)
    return [" -> ".join(cycle) for cycle in graph.find_cycles()]
