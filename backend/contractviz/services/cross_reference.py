"""
Cross-Reference Resolver.

Computes call edges (function -> function), storage access edges
(function -> state variable) and emission edges (function -> event) by
plain substring co-occurrence inside scope slices. Comments, string
literals and shadowing are not excluded: a name mentioned anywhere in a
slice counts as a reference.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from contractviz.services.pattern_extractor import ExtractionResult
from contractviz.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CrossReferences:
    """Edges keyed by declaration position in the ExtractionResult."""

    calls: tuple[tuple[str, ...], ...]
    read_by: tuple[tuple[str, ...], ...]
    written_by: tuple[tuple[str, ...], ...]
    emitted_by: tuple[tuple[str, ...], ...]


def _unique(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


def _calls_from(name: str, scope: str, known: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(other for other in known if other != name and f"{other}(" in scope)


def resolve(extraction: ExtractionResult) -> CrossReferences:
    """Resolve every reference edge of *extraction* against its own text."""
    known = _unique(extraction.function_names)
    scopes = [(f.name, extraction.scope_of(f)) for f in extraction.functions]

    calls = tuple(_calls_from(name, scope, known) for name, scope in scopes)

    read_by: list[tuple[str, ...]] = []
    written_by: list[tuple[str, ...]] = []
    for var in extraction.state_variables:
        assignment = f"{var.name} ="
        read_by.append(_unique(name for name, scope in scopes if var.name in scope))
        written_by.append(_unique(name for name, scope in scopes if assignment in scope))

    emitted_by: list[tuple[str, ...]] = []
    for event in extraction.events:
        if event.entry_text is not None:
            emitted_by.append(tuple(name for name in known if name in event.entry_text))
        elif f"emit {event.name}" in extraction.text:
            emitted_by.append(known)
        else:
            emitted_by.append(())

    refs = CrossReferences(
        calls=calls,
        read_by=tuple(read_by),
        written_by=tuple(written_by),
        emitted_by=tuple(emitted_by),
    )
    logger.debug(
        "Resolved references  call_edges=%d  writes=%d  emissions=%d",
        sum(len(c) for c in refs.calls),
        sum(len(w) for w in refs.written_by),
        sum(len(e) for e in refs.emitted_by),
    )
    return refs
