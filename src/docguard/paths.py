"""Normalización de paths, recorrido del proyecto y escrituras idempotentes."""

from __future__ import annotations

import hashlib
import pathlib
from collections.abc import Iterable, Iterator


def to_posix(path: str) -> str:
    """Convierte cualquier separador a '/' y quita prefijos './'."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def normalize(path: str | pathlib.Path, root: pathlib.Path) -> str:
    """Devuelve el path relativo al root del proyecto, con separador '/'.

    Acepta paths absolutos o relativos y ambos estilos de separador. Un path
    absoluto fuera del root se devuelve tal cual (normalizado).
    """
    text = to_posix(str(path))
    candidate = pathlib.PurePosixPath(text)
    if candidate.is_absolute() or (len(text) > 1 and text[1] == ":"):
        try:
            return pathlib.Path(text).resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            return text
    return text


def resolve(rel_path: str, root: pathlib.Path) -> pathlib.Path:
    """Path absoluto de un path relativo al proyecto."""
    return root / pathlib.PurePosixPath(rel_path)


def file_name(path: str) -> str:
    return pathlib.PurePosixPath(to_posix(path)).name


def suffix(path: str) -> str:
    return pathlib.PurePosixPath(to_posix(path)).suffix.lower()


def is_excluded(rel_path: str, excluded_dirs: Iterable[str]) -> bool:
    """True si algún segmento del path está en la lista de directorios excluidos."""
    excluded = {d.lower() for d in excluded_dirs}
    parts = pathlib.PurePosixPath(rel_path).parts[:-1]
    return any(part.lower() in excluded for part in parts)


def walk_files(
    root: pathlib.Path,
    extensions: Iterable[str],
    excluded_dirs: Iterable[str],
) -> Iterator[pathlib.Path]:
    """Recorre el proyecto devolviendo archivos con las extensiones dadas, ordenados."""
    wanted = {e.lower() for e in extensions}
    if not root.is_dir():
        return
    for p in sorted(root.rglob("*")):
        if not p.is_file() or p.suffix.lower() not in wanted:
            continue
        if is_excluded(p.relative_to(root).as_posix(), excluded_dirs):
            continue
        yield p


def content_hash(raw: str) -> str:
    """SHA-256 del contenido completo del archivo."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def write_if_changed(path: pathlib.Path, content: str) -> bool:
    """Escribe el archivo en UTF-8 solo si el contenido difiere byte a byte.

    Retorna True si hubo escritura.
    """
    data = content.encode("utf-8")
    if path.is_file() and path.read_bytes() == data:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return True
