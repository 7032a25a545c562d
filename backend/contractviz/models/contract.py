"""
Contract domain model.

Immutable pydantic models describing one analysed contract: functions,
events, state variables, roles and security findings, plus the tagged
interface-list entries accepted in interface mode.

Set-valued fields are tuples kept in first-seen order so that two analyses
of the same text compare and serialise identically.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Mutability = Literal["pure", "view", "nonpayable", "payable"]
Visibility = Literal["public", "private", "internal", "external"]
FlowCategory = Literal["owner", "admin", "user", "system"]
Severity = Literal["High", "Medium", "Low", "Info"]

MUTABILITIES: tuple[str, ...] = ("pure", "view", "nonpayable", "payable")
VISIBILITIES: tuple[str, ...] = ("public", "private", "internal", "external")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ── Records ───────────────────────────────────────────────────


class Parameter(_Frozen):
    """A typed name pair. ``indexed`` is only set for event inputs."""
    name: str = ""
    type: str
    indexed: bool | None = None


class FunctionRecord(_Frozen):
    """A function declaration with its derived roles and call references."""
    name: str
    kind: Literal["function"] = "function"
    inputs: tuple[Parameter, ...] = ()
    outputs: tuple[Parameter, ...] = ()
    mutability: Mutability = "nonpayable"
    visibility: Visibility = "public"
    modifiers: tuple[str, ...] = ()
    is_payable: bool = False
    roles: tuple[str, ...] = Field(default=("user",), min_length=1)
    flow_category: FlowCategory = "user"
    calls: tuple[str, ...] = ()


class EventRecord(_Frozen):
    """An event declaration and the functions associated with emitting it."""
    name: str
    inputs: tuple[Parameter, ...] = ()
    anonymous: bool = False
    emitted_by: tuple[str, ...] = ()


class StateVariableRecord(_Frozen):
    """A storage variable with the functions that read or assign it."""
    name: str
    type: str
    visibility: Visibility
    is_constant: bool = False
    initial_value: str | None = None
    read_by: tuple[str, ...] = ()
    written_by: tuple[str, ...] = ()


class SecurityFinding(_Frozen):
    """A single heuristic security observation."""
    severity: Severity
    description: str
    location: str
    recommendation: str
    affected_functions: tuple[str, ...] = ()


class RoleRecord(_Frozen):
    """Functions grouped under one access-control role."""
    name: str
    permissions: tuple[str, ...] = ()
    functions: tuple[str, ...] = ()


class AnalyzedContract(_Frozen):
    """Aggregate root produced once per analysed input."""
    name: str
    version: str = "Unknown"
    license: str | None = None
    inherits_from: tuple[str, ...] = ()
    modifiers: tuple[str, ...] = ()
    functions: tuple[FunctionRecord, ...] = ()
    events: tuple[EventRecord, ...] = ()
    state_variables: tuple[StateVariableRecord, ...] = ()
    roles: tuple[RoleRecord, ...] = ()
    security_findings: tuple[SecurityFinding, ...] = ()
    has_ownership: bool = False
    has_access_control: bool = False

    def function_names(self) -> set[str]:
        return {f.name for f in self.functions}

    def function_index(self, name: str) -> int:
        """Index of the first function called *name*, or -1."""
        for index, func in enumerate(self.functions):
            if func.name == name:
                return index
        return -1


# ── Interface-list entries ────────────────────────────────────


class EntryParameter(BaseModel):
    """One ``inputs``/``outputs`` element of an interface entry."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    type: str = ""
    indexed: bool | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _null_type(cls, value: Any) -> Any:
        return "" if value is None else value


class FunctionEntry(BaseModel):
    """Interface entry with ``type == "function"``."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["function"]
    name: str = Field(..., min_length=1)
    inputs: list[EntryParameter] = Field(default_factory=list)
    outputs: list[EntryParameter] = Field(default_factory=list)
    stateMutability: str | None = None
    visibility: str | None = None
    # Pre-0.5 interface lists carry these flags instead of stateMutability
    constant: bool | None = None
    payable: bool | None = None

    @field_validator("inputs", "outputs", mode="before")
    @classmethod
    def _null_params(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("stateMutability", "visibility", mode="before")
    @classmethod
    def _non_string_keyword(cls, value: Any) -> Any:
        # Unknown keywords fall back to the defaults in the properties below
        return value if isinstance(value, str) else None

    @property
    def mutability(self) -> str:
        if self.stateMutability in MUTABILITIES:
            return self.stateMutability
        if self.payable:
            return "payable"
        if self.constant:
            return "view"
        return "nonpayable"

    @property
    def resolved_visibility(self) -> str:
        return self.visibility if self.visibility in VISIBILITIES else "public"


class EventEntry(BaseModel):
    """Interface entry with ``type == "event"``."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["event"]
    name: str = Field(..., min_length=1)
    inputs: list[EntryParameter] = Field(default_factory=list)
    anonymous: bool | None = None

    @field_validator("inputs", mode="before")
    @classmethod
    def _null_params(cls, value: Any) -> Any:
        return [] if value is None else value


InterfaceEntry = Annotated[Union[FunctionEntry, EventEntry], Field(discriminator="type")]


# ── Batch analysis ────────────────────────────────────────────


class NamedAnalysis(_Frozen):
    """One successfully analysed input of a batch."""
    name: str
    contract: AnalyzedContract


class BatchAnalysis(_Frozen):
    """Per-input outcomes of a batch; failures are isolated in ``errors``."""
    contracts: tuple[NamedAnalysis, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def combined_error(self) -> str | None:
        """All per-input errors on one newline-separated message, or None."""
        return "\n".join(self.errors) if self.errors else None
