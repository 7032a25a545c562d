"""
Pattern Extractor.

Pulls declarations out of contract text without a grammar. Two input modes
are recognised:

* interface mode: a JSON interface list (ABI) of function / event entries,
  or a compiler artifact object carrying such a list under ``"abi"``;
* source mode: raw Solidity text scanned with structural regexes for the
  contract header, version pragma, license comment, modifiers, functions,
  events and state variables.

Every declaration records its start offset. Downstream stages treat
``text[offset:]`` as the declaration's scope: there is no brace matching, so
a scope slice over-includes everything that lexically follows the
declaration.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import TypeAdapter, ValidationError

from contractviz.middleware.error_handler import FormatError
from contractviz.models.contract import (
    MUTABILITIES,
    VISIBILITIES,
    EntryParameter,
    EventEntry,
    FunctionEntry,
    InterfaceEntry,
    Parameter,
)
from contractviz.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONTRACT_NAME = "Contract"
UNKNOWN_VERSION = "Unknown"


# ── Declarations ──────────────────────────────────────────────


@dataclass(frozen=True)
class ModifierDeclaration:
    name: str
    params: tuple[Parameter, ...]
    offset: int


@dataclass(frozen=True)
class FunctionDeclaration:
    """A recognised function.

    ``offset`` is the start offset in the text (source mode) or the entry
    position in the list (interface mode). ``entry_text`` is the entry's
    compact JSON serialisation in interface mode and ``None`` otherwise.
    """

    name: str
    offset: int
    inputs: tuple[Parameter, ...] = ()
    outputs: tuple[Parameter, ...] = ()
    visibility: str = "public"
    mutability: str = "nonpayable"
    modifiers: tuple[str, ...] = ()
    entry_text: str | None = None


@dataclass(frozen=True)
class EventDeclaration:
    name: str
    offset: int
    inputs: tuple[Parameter, ...] = ()
    anonymous: bool = False
    entry_text: str | None = None


@dataclass(frozen=True)
class StateVariableDeclaration:
    name: str
    type: str
    visibility: str
    offset: int
    is_constant: bool = False
    initial_value: str | None = None


@dataclass(frozen=True)
class ExtractionResult:
    """Everything the extractor recognised in one input text."""

    mode: Literal["interface", "source"]
    text: str
    contract_name: str = DEFAULT_CONTRACT_NAME
    version: str = UNKNOWN_VERSION
    license: str | None = None
    inherits_from: tuple[str, ...] = ()
    modifiers: tuple[ModifierDeclaration, ...] = ()
    functions: tuple[FunctionDeclaration, ...] = ()
    events: tuple[EventDeclaration, ...] = ()
    state_variables: tuple[StateVariableDeclaration, ...] = ()

    def scope_of(self, decl: FunctionDeclaration | EventDeclaration) -> str:
        """Scope slice of *decl*: its offset to end of text, or its entry."""
        if decl.entry_text is not None:
            return decl.entry_text
        return self.text[decl.offset:]

    @property
    def function_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.functions)


# ── Source-mode patterns ──────────────────────────────────────

_CONTRACT_RE = re.compile(r"\bcontract\s+(\w+)(?:\s+is\s+([^{;]+))?")
_PRAGMA_RE = re.compile(r"\bpragma\s+solidity\s+([^;]+)")
_LICENSE_RE = re.compile(r"//\s*SPDX-License-Identifier:\s*(.+)")
_MODIFIER_RE = re.compile(r"\bmodifier\s+(\w+)\s*(?:\(([^)]*)\))?[^{};]*\{")
_FUNCTION_RE = re.compile(r"\bfunction\s+(\w+)\s*\(([^)]*)\)([^{};]*)\{")
_RETURNS_RE = re.compile(r"\breturns\s*\(([^)]*)\)")
_HEADER_TOKEN_RE = re.compile(r"([A-Za-z_$][\w$.]*)\s*(\([^)]*\))?")
_EVENT_RE = re.compile(r"\bevent\s+(\w+)\s*\(([^)]*)\)\s*(anonymous)?\s*;")
_CALL_ARGS_RE = re.compile(r"\([^)]*\)")

_TYPE_PATTERN = r"(mapping\s*\([^;{}]*?\)|[A-Za-z_$][\w$.]*(?:\s*\[[^\]]*\])*)"
# uint256 public constant MAX = 10;
_STATE_VAR_TRAILING_RE = re.compile(
    r"(?<![\w$.])" + _TYPE_PATTERN
    + r"\s+(public|private|internal)\s+(?:(constant|immutable)\s+)?(\w+)\s*(?:=\s*([^;]+))?;"
)
# public constant uint256 MAX = 10;
_STATE_VAR_LEADING_RE = re.compile(
    r"\b(public|private|internal)\s+(?:(constant)\s+)?(\w+)\s+(\w+)(?:\s*=\s*([^;]+))?;"
)

_HEADER_MARKERS = {"virtual", "override", "returns"}
_DATA_LOCATIONS = {"memory", "storage", "calldata"}
_FUNCTION_KEYWORD_RE = re.compile(r"\bfunction\b")


def _split_params(raw: str) -> list[list[str]]:
    """Split a parameter list on commas, then each parameter on whitespace."""
    return [parts for parts in (chunk.split() for chunk in raw.split(",")) if parts]


def _parse_params(raw: str) -> tuple[Parameter, ...]:
    """Turn ``uint256 a, address b`` into Parameter pairs; a lone type has no name."""
    params: list[Parameter] = []
    for parts in _split_params(raw):
        name = parts[-1] if len(parts) > 1 and parts[-1] not in _DATA_LOCATIONS else ""
        params.append(Parameter(name=name, type=parts[0]))
    return tuple(params)


def _parse_event_params(raw: str) -> tuple[Parameter, ...]:
    params: list[Parameter] = []
    for parts in _split_params(raw):
        indexed = "indexed" in parts
        tokens = [p for p in parts if p != "indexed"]
        if not tokens:
            continue
        name = tokens[-1] if len(tokens) > 1 else ""
        params.append(Parameter(name=name, type=tokens[0], indexed=indexed))
    return tuple(params)


def _parse_inheritance(raw: str | None) -> tuple[str, ...]:
    """``A, B("x", 1), C`` -> (A, B, C)."""
    if not raw:
        return ()
    without_args = _CALL_ARGS_RE.sub("", raw)
    parents = [p.strip() for p in without_args.split(",")]
    return tuple(p for p in parents if re.fullmatch(r"[\w$.]+", p))


def _parse_function_header(header: str) -> tuple[str, str, tuple[Parameter, ...], tuple[str, ...]]:
    """
    Read the text between a function's parameter list and its body.

    Returns ``(visibility, mutability, outputs, modifiers)``. The first
    visibility and mutability keywords win; every other identifier (apart
    from virtual / override) is recorded as a modifier invocation.
    """
    outputs: tuple[Parameter, ...] = ()
    returns_match = _RETURNS_RE.search(header)
    if returns_match:
        outputs = _parse_params(returns_match.group(1))
        header = header[: returns_match.start()] + " " + header[returns_match.end():]

    visibility: str | None = None
    mutability: str | None = None
    modifiers: list[str] = []
    for token in _HEADER_TOKEN_RE.finditer(header):
        word = token.group(1)
        if word in VISIBILITIES:
            visibility = visibility or word
        elif word in MUTABILITIES:
            mutability = mutability or word
        elif word in _HEADER_MARKERS:
            continue
        elif word not in modifiers:
            modifiers.append(word)

    return visibility or "public", mutability or "nonpayable", outputs, tuple(modifiers)


def _in_function_header(text: str, start: int) -> bool:
    """True when the statement holding *start* is a bodiless ``function ...;`` header."""
    statement_start = max(text.rfind(c, 0, start) for c in ";{}") + 1
    return _FUNCTION_KEYWORD_RE.search(text, statement_start, start) is not None


def _find_state_variables(text: str) -> tuple[StateVariableDeclaration, ...]:
    found: list[StateVariableDeclaration] = []
    claimed: list[tuple[int, int]] = []

    for match in _STATE_VAR_TRAILING_RE.finditer(text):
        if _in_function_header(text, match.start()):
            continue
        var_type, visibility, qualifier, name, value = match.groups()
        found.append(StateVariableDeclaration(
            name=name,
            type=re.sub(r"\s+", " ", var_type.strip()),
            visibility=visibility,
            offset=match.start(),
            is_constant=qualifier == "constant",
            initial_value=value.strip() if value else None,
        ))
        claimed.append(match.span())

    for match in _STATE_VAR_LEADING_RE.finditer(text):
        start, end = match.span()
        if any(start < c_end and c_start < end for c_start, c_end in claimed):
            continue
        if _in_function_header(text, start):
            continue
        visibility, constant, var_type, name, value = match.groups()
        found.append(StateVariableDeclaration(
            name=name,
            type=var_type,
            visibility=visibility,
            offset=start,
            is_constant=bool(constant),
            initial_value=value.strip() if value else None,
        ))

    found.sort(key=lambda v: v.offset)
    return tuple(found)


def _extract_source(text: str) -> ExtractionResult:
    contract_match = _CONTRACT_RE.search(text)
    pragma_match = _PRAGMA_RE.search(text)
    license_match = _LICENSE_RE.search(text)

    modifiers = tuple(
        ModifierDeclaration(
            name=m.group(1),
            params=_parse_params(m.group(2) or ""),
            offset=m.start(),
        )
        for m in _MODIFIER_RE.finditer(text)
    )

    functions: list[FunctionDeclaration] = []
    for m in _FUNCTION_RE.finditer(text):
        visibility, mutability, outputs, func_modifiers = _parse_function_header(m.group(3))
        functions.append(FunctionDeclaration(
            name=m.group(1),
            offset=m.start(),
            inputs=_parse_params(m.group(2)),
            outputs=outputs,
            visibility=visibility,
            mutability=mutability,
            modifiers=func_modifiers,
        ))

    events = tuple(
        EventDeclaration(
            name=m.group(1),
            offset=m.start(),
            inputs=_parse_event_params(m.group(2)),
            anonymous=m.group(3) is not None,
        )
        for m in _EVENT_RE.finditer(text)
    )

    state_variables = _find_state_variables(text)

    if not (contract_match or modifiers or functions or events or state_variables):
        raise FormatError("no contract declarations found in source text", text)

    result = ExtractionResult(
        mode="source",
        text=text,
        contract_name=contract_match.group(1) if contract_match else DEFAULT_CONTRACT_NAME,
        version=pragma_match.group(1).strip() if pragma_match else UNKNOWN_VERSION,
        license=license_match.group(1).strip() if license_match else None,
        inherits_from=_parse_inheritance(contract_match.group(2) if contract_match else None),
        modifiers=modifiers,
        functions=tuple(functions),
        events=events,
        state_variables=state_variables,
    )
    logger.debug(
        "Source extraction  contract=%s  functions=%d  events=%d  state=%d  modifiers=%d",
        result.contract_name,
        len(result.functions),
        len(result.events),
        len(result.state_variables),
        len(result.modifiers),
    )
    return result


# ── Interface-mode ────────────────────────────────────────────

_ENTRY_ADAPTER: TypeAdapter[FunctionEntry | EventEntry] = TypeAdapter(InterfaceEntry)


def _entry_params(params: list[EntryParameter], with_indexed: bool = False) -> tuple[Parameter, ...]:
    return tuple(
        Parameter(
            name=p.name or "",
            type=p.type,
            indexed=bool(p.indexed) if with_indexed else None,
        )
        for p in params
    )


def _extract_interface(text: str, entries: list[Any], contract_name: str | None = None) -> ExtractionResult:
    functions: list[FunctionDeclaration] = []
    events: list[EventDeclaration] = []

    for position, item in enumerate(entries):
        if not isinstance(item, dict) or item.get("type") not in ("function", "event"):
            logger.debug("Skipping interface entry %d: not a function or event", position)
            continue
        try:
            entry = _ENTRY_ADAPTER.validate_python(item)
        except ValidationError as exc:
            logger.debug("Skipping malformed interface entry %d: %s", position, exc.errors()[0]["msg"])
            continue

        entry_text = json.dumps(item, separators=(",", ":"), ensure_ascii=False)
        if isinstance(entry, FunctionEntry):
            functions.append(FunctionDeclaration(
                name=entry.name,
                offset=position,
                inputs=_entry_params(entry.inputs),
                outputs=_entry_params(entry.outputs),
                visibility=entry.resolved_visibility,
                mutability=entry.mutability,
                entry_text=entry_text,
            ))
        else:
            events.append(EventDeclaration(
                name=entry.name,
                offset=position,
                inputs=_entry_params(entry.inputs, with_indexed=True),
                anonymous=bool(entry.anonymous),
                entry_text=entry_text,
            ))

    logger.debug(
        "Interface extraction  entries=%d  functions=%d  events=%d",
        len(entries),
        len(functions),
        len(events),
    )
    return ExtractionResult(
        mode="interface",
        text=text,
        contract_name=contract_name or DEFAULT_CONTRACT_NAME,
        functions=tuple(functions),
        events=tuple(events),
    )


def _probe_interface(text: str) -> tuple[list[Any], str | None] | None:
    """
    Return ``(entries, contract_name)`` when *text* is a JSON interface
    list, ``None`` when it is not JSON at all. Raises FormatError for JSON
    of any other shape, and for arrays or objects nested deeper than the
    decoder can follow.
    """
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    except RecursionError:
        raise FormatError("input nests too deeply", text) from None

    if isinstance(parsed, list):
        return parsed, None
    if isinstance(parsed, dict) and isinstance(parsed.get("abi"), list):
        name = parsed.get("contractName")
        return parsed["abi"], name if isinstance(name, str) and name else None
    raise FormatError("JSON input must be an interface list", text)


# ══════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════


def extract(text: str) -> ExtractionResult:
    """
    Recognise the declarations in *text*.

    Raises
    ------
    FormatError
        When the text is blank, is JSON that is not an interface list, or is
        source text with no contract header and no declarations.
    """
    if not text or not text.strip():
        raise FormatError("input is empty", text or "")

    probed = _probe_interface(text)
    if probed is not None:
        entries, contract_name = probed
        return _extract_interface(text, entries, contract_name)
    return _extract_source(text)


def extract_interface(entries: list[Any]) -> ExtractionResult:
    """Interface-mode extraction over already-parsed entries."""
    text = json.dumps(entries, separators=(",", ":"), ensure_ascii=False)
    return _extract_interface(text, entries)


def extract_source(text: str) -> ExtractionResult:
    """Source-mode extraction without the interface-list probe."""
    if not text or not text.strip():
        raise FormatError("input is empty", text or "")
    return _extract_source(text)
