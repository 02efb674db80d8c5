"""Build test catalogs from test binaries and write them out.

A catalog is a ``set`` of :class:`CatalogEntry`; each entry is written as::

    "<binary path>" | <qualified name>
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from testctl.extractor.metadata import load_binary
from testctl.extractor.types import (
    EXCLUDING_MARKERS,
    TEST_MARKERS,
    CatalogEntry,
    ExtractOptions,
    Level,
    MarkerKind,
    MethodInfo,
    NotSupportedError,
    TestEntity,
    TypeInfo,
    parse_level,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Selection rules
# ---------------------------------------------------------------------------

def is_test_suite(t: TypeInfo) -> bool:
    """Public fixture class that is neither explicit-only nor ignored."""
    return t.public and t.has(MarkerKind.FIXTURE) and not t.has(*EXCLUDING_MARKERS)


def is_test_method(m: MethodInfo) -> bool:
    """Public method with a test marker that is neither explicit-only nor ignored."""
    return m.public and m.has(*TEST_MARKERS) and not m.has(*EXCLUDING_MARKERS)


def matches_categories(
    m: MethodInfo, include: str | None = None, exclude: str | None = None,
) -> bool:
    """Apply category filters; *exclude* wins over *include*.

    Blank filters count as unset. Without an include filter every method
    that is not excluded matches.
    """
    categories = m.categories
    if exclude and exclude.strip() and exclude in categories:
        return False
    if include and include.strip():
        return include in categories
    return True


def _resolve_base(name: str, owner: TypeInfo, by_full_name: dict[str, TypeInfo]) -> TypeInfo | None:
    local = f"{owner.namespace}.{name}" if owner.namespace else name
    for candidate in (local, name):
        if candidate in by_full_name:
            return by_full_name[candidate]
    matches = [t for full, t in by_full_name.items() if full.endswith(f".{name}")]
    if len(matches) == 1:
        return matches[0]
    logger.debug("%s: base %r not resolved in this binary (%d candidates)", owner.full_name, name, len(matches))
    return None


def resolve_methods(t: TypeInfo, types: Iterable[TypeInfo]) -> list[tuple[TypeInfo, MethodInfo]]:
    """Methods visible on *t*, each paired with the type that declares it.

    Bases defined in the same binary are followed depth-first; a method
    declared closer to *t* hides one of the same name further up. Bases
    from outside the binary are skipped.
    """
    by_full_name = {x.full_name: x for x in types}
    resolved: list[tuple[TypeInfo, MethodInfo]] = []
    seen: set[str] = set()
    visited: set[str] = set()

    def visit(owner: TypeInfo) -> None:
        if owner.full_name in visited:
            return
        visited.add(owner.full_name)
        # last definition in a class body wins
        for m in reversed(owner.methods):
            if m.name not in seen:
                seen.add(m.name)
                resolved.append((owner, m))
        for base in owner.bases:
            parent = _resolve_base(base, owner, by_full_name)
            if parent is not None:
                visit(parent)

    visit(t)
    return resolved


def _names(
    suites: Iterable[TypeInfo],
    level: Level,
    include: str | None,
    exclude: str | None,
    types: list[TypeInfo],
) -> set[str]:
    if level is Level.NAMESPACE:
        return {t.namespace for t in suites}
    if level is Level.CLASS:
        return {t.full_name for t in suites}
    if level is Level.FUNCTION:
        return {
            f"{declaring.full_name}.{m.name}"
            for t in suites
            for declaring, m in resolve_methods(t, types)
            if is_test_method(m) and matches_categories(m, include, exclude)
        }
    raise NotSupportedError(f"{level.value} level analyzing hasn't been implemented yet.")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_catalog(
    binary_path: str | Path,
    level: Level | str,
    include_category: str | None = None,
    exclude_category: str | None = None,
) -> set[CatalogEntry]:
    """Extract the catalog of one test binary.

    Args:
        binary_path: Module, package directory or archive to scan.
        level: Granularity of the catalog entries.
        include_category: Keep only test methods tagged with this category.
        exclude_category: Drop test methods tagged with this category.

    Returns:
        The set of catalog entries; iteration order is unspecified.

    Raises:
        NotSupportedError: If *level* is ``testcase``.
        BinaryNotFoundError: If *binary_path* is not a readable test binary.
        ValueError: If *level* is not a known level.
    """
    lv = parse_level(level)
    if lv is Level.TEST_CASE:
        raise NotSupportedError("Test case level analyzing hasn't been implemented yet.")

    metadata = load_binary(binary_path)
    suites = [t for t in metadata.types if is_test_suite(t)]
    location = str(metadata.path)

    catalog = {
        CatalogEntry(binary_path=location, entity=TestEntity(level=lv, name=name))
        for name in _names(suites, lv, include_category, exclude_category, metadata.types)
    }
    logger.debug("%s: %d suite(s), %d %s entr(ies)", location, len(suites), len(catalog), lv.value)
    return catalog


def format_entry(entry: CatalogEntry) -> str:
    """Render one catalog line (without the newline)."""
    return f'"{entry.binary_path}" | {entry.name}'


def write_catalog(
    catalog: Iterable[CatalogEntry],
    output: str | Path | None = None,
    stream: TextIO | None = None,
) -> int:
    """Write *catalog* to *stream*, or append it to *output*.

    Lines are sorted so repeated runs produce the same file; readers must
    not rely on the order.

    Returns:
        Number of lines written.
    """
    lines = sorted(format_entry(e) for e in catalog)
    if output:
        with open(output, "a", encoding="utf-8") as fh:
            fh.writelines(f"{line}\n" for line in lines)
    else:
        out = stream if stream is not None else sys.stdout
        out.writelines(f"{line}\n" for line in lines)
        out.flush()
    return len(lines)


def run_extraction(
    binaries: Iterable[str | Path],
    options: ExtractOptions,
    stream: TextIO | None = None,
) -> int:
    """Extract and write the catalog of each binary in turn.

    The first failure propagates and stops the batch; catalogs already
    written stay in place.

    Returns:
        Total number of lines written.
    """
    if options.output:
        Path(options.output).parent.mkdir(parents=True, exist_ok=True)

    total = 0
    for binary in binaries:
        catalog = generate_catalog(
            binary,
            options.level,
            include_category=options.include_category,
            exclude_category=options.exclude_category,
        )
        total += write_catalog(catalog, output=options.output, stream=stream)

    if options.output:
        logger.info("Wrote %d catalog line(s) to %s", total, options.output)
    return total
