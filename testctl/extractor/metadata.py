"""Read test metadata from a test binary without executing it.

A test binary is a single ``.py`` module, a directory tree of modules, or a
zip archive of modules (``.zip``, ``.pyz``, ``.whl``). Sources are parsed
with :mod:`ast`; decorators on top-level classes and their methods are
collected as markers.

Namespaces follow Python module names: a file's dotted path relative to the
binary root, with ``__init__`` mapped to its package. A directory that is
itself a package (holds ``__init__.py``) prefixes its own name.
"""

from __future__ import annotations

import ast
import logging
import zipfile
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

from testctl.extractor.types import (
    BinaryMetadata,
    BinaryNotFoundError,
    InvalidBinaryError,
    Marker,
    MarkerKind,
    MethodInfo,
    TypeInfo,
)

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".py"
ARCHIVE_SUFFIXES = frozenset({".zip", ".pyz", ".whl"})

_KINDS = {kind.value: kind for kind in MarkerKind}


# ---------------------------------------------------------------------------
# Module naming
# ---------------------------------------------------------------------------

def module_name(parts: tuple[str, ...]) -> str | None:
    """Dotted module name for a source path split into *parts*.

    Returns ``None`` when any component is not a Python identifier
    (``__pycache__`` is one; ``foo-1.0.dist-info`` is not).
    """
    if not parts or not parts[-1].endswith(SOURCE_SUFFIX):
        return None
    names = [*parts[:-1], parts[-1][: -len(SOURCE_SUFFIX)]]
    if names[-1] == "__init__":
        names.pop()
    if not names or any(not n.isidentifier() or n == "__pycache__" for n in names):
        return None
    return ".".join(names)


# ---------------------------------------------------------------------------
# Marker extraction
# ---------------------------------------------------------------------------

def _terminal_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Call):
        return _terminal_name(node.func)
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    return None


def _string_args(node: ast.expr) -> tuple[str, ...]:
    if not isinstance(node, ast.Call):
        return ()
    values = [*node.args, *(kw.value for kw in node.keywords)]
    return tuple(v.value for v in values if isinstance(v, ast.Constant) and isinstance(v.value, str))


def parse_markers(decorators: list[ast.expr]) -> list[Marker]:
    """Turn decorator expressions into markers, dropping unknown decorators."""
    markers = []
    for node in decorators:
        name = _terminal_name(node)
        kind = _KINDS.get(name.replace("_", "").lower()) if name else None
        if kind is not None:
            markers.append(Marker(kind=kind, args=_string_args(node)))
    return markers


def _dotted_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        owner = _dotted_name(node.value)
        return f"{owner}.{node.attr}" if owner else None
    return None


def parse_module(source: str | bytes, namespace: str, filename: str = "<bundle>") -> list[TypeInfo]:
    """Collect the top-level classes of one module.

    *source* may be raw bytes, in which case a BOM or coding cookie picks the
    encoding the way the interpreter would.

    Raises:
        InvalidBinaryError: If *source* is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=filename)
    except (SyntaxError, ValueError) as exc:
        raise InvalidBinaryError(f"Failed to parse {filename}: {exc}") from exc

    types = []
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        methods = [
            MethodInfo(name=item.name, markers=parse_markers(item.decorator_list))
            for item in node.body
            if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef))
        ]
        types.append(TypeInfo(
            name=node.name,
            markers=parse_markers(node.decorator_list),
            namespace=namespace,
            methods=methods,
            bases=[b for b in map(_dotted_name, node.bases) if b],
        ))
    return types


# ---------------------------------------------------------------------------
# Source discovery
# ---------------------------------------------------------------------------

def _iter_file(path: Path) -> Iterator[tuple[str, str, bytes]]:
    name = module_name((path.name,))
    if name is None:
        name = path.resolve().parent.name if path.name == "__init__.py" else path.stem
    yield name, str(path), path.read_bytes()


def _iter_directory(root: Path) -> Iterator[tuple[str, str, bytes]]:
    prefix = ()
    if (root / "__init__.py").is_file():
        package = root.resolve().name
        if package.isidentifier():
            prefix = (package,)
        else:
            logger.warning("%s: package name %r is not an identifier, scanning without prefix", root, package)
    for file in sorted(root.rglob(f"*{SOURCE_SUFFIX}")):
        name = module_name(prefix + file.relative_to(root).parts)
        if name is None:
            continue
        yield name, str(file), file.read_bytes()


def _iter_archive(path: Path) -> Iterator[tuple[str, str, bytes]]:
    try:
        with zipfile.ZipFile(path) as zf:
            for entry in sorted(zf.namelist()):
                name = module_name(PurePosixPath(entry).parts)
                if name is None:
                    continue
                yield name, f"{path}/{entry}", zf.read(entry)
    except zipfile.BadZipFile as exc:
        raise InvalidBinaryError(f"Not a valid archive: {path}: {exc}") from exc


def iter_sources(path: Path) -> Iterator[tuple[str, str, bytes]]:
    """Yield ``(namespace, filename, source bytes)`` for every module in a binary.

    Raises:
        BinaryNotFoundError: If *path* does not exist.
        InvalidBinaryError: If *path* is not a supported binary form.
    """
    if not path.exists():
        raise BinaryNotFoundError(f"File was not found: '{path}'")
    if path.is_dir():
        return _iter_directory(path)
    if path.suffix == SOURCE_SUFFIX:
        return _iter_file(path)
    if path.suffix in ARCHIVE_SUFFIXES:
        return _iter_archive(path)
    raise InvalidBinaryError(f"Unsupported test binary: '{path}'")


def load_binary(path: str | Path) -> BinaryMetadata:
    """Read every class declared in the test binary at *path*.

    Args:
        path: Module, package directory or archive to scan.

    Returns:
        The binary's metadata; ``path`` is resolved to an absolute path.

    Raises:
        BinaryNotFoundError: If *path* does not exist.
        InvalidBinaryError: If *path* cannot be read as a test binary.
    """
    if path is None or not str(path).strip():
        raise BinaryNotFoundError("Test binary path must not be empty")
    p = Path(path)
    types: list[TypeInfo] = []
    for namespace, filename, source in iter_sources(p):
        found = parse_module(source, namespace, filename)
        logger.debug("%s: %d class(es) in %s", filename, len(found), namespace)
        types.extend(found)
    return BinaryMetadata(path=p.resolve(), types=types)
