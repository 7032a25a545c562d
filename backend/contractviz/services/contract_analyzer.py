"""
Contract Analyzer Service.

Runs the analysis pipeline over one contract text (extraction, reference
resolution, role classification, security scan) and assembles the result
into an immutable AnalyzedContract for the diagram builders and the API.
Also analyses batches of named contract texts with per-input failure
isolation.
"""

from __future__ import annotations

from typing import Any, Iterable

from contractviz.middleware.error_handler import AppException, BatchAnalysisError
from contractviz.models.contract import (
    AnalyzedContract,
    BatchAnalysis,
    EventRecord,
    FunctionRecord,
    NamedAnalysis,
    StateVariableRecord,
)
from contractviz.services.cross_reference import resolve
from contractviz.services.pattern_extractor import (
    ExtractionResult,
    extract,
    extract_interface,
    extract_source,
)
from contractviz.services.role_classifier import RoleTableBuilder, classify, flow_category
from contractviz.services.security_scanner import scan
from contractviz.utils.logger import get_logger

logger = get_logger(__name__)

NO_CONTRACTS_MESSAGE = "No contracts to analyze. Please add contract source code."


# ══════════════════════════════════════════════════════════════
# MODEL ASSEMBLY
# ══════════════════════════════════════════════════════════════


def assemble(extraction: ExtractionResult) -> AnalyzedContract:
    """
    Combine the extracted declarations with their derived facts.

    The role table builder lives only for this call, so concurrent analyses
    never share state.
    """
    refs = resolve(extraction)
    role_table = RoleTableBuilder()

    # ── Functions ────────────────────────────────────────────
    functions: list[FunctionRecord] = []
    for decl, calls in zip(extraction.functions, refs.calls):
        roles = classify(decl.name, extraction.scope_of(decl))
        role_table.add(decl.name, roles)
        functions.append(FunctionRecord(
            name=decl.name,
            inputs=decl.inputs,
            outputs=decl.outputs,
            mutability=decl.mutability,
            visibility=decl.visibility,
            modifiers=decl.modifiers,
            is_payable=decl.mutability == "payable",
            roles=roles,
            flow_category=flow_category(roles, decl.mutability),
            calls=calls,
        ))

    # ── Events ───────────────────────────────────────────────
    events = tuple(
        EventRecord(
            name=decl.name,
            inputs=decl.inputs,
            anonymous=decl.anonymous,
            emitted_by=emitted_by,
        )
        for decl, emitted_by in zip(extraction.events, refs.emitted_by)
    )

    # ── State variables ──────────────────────────────────────
    state_variables = tuple(
        StateVariableRecord(
            name=decl.name,
            type=decl.type,
            visibility=decl.visibility,
            is_constant=decl.is_constant,
            initial_value=decl.initial_value,
            read_by=read_by,
            written_by=written_by,
        )
        for decl, read_by, written_by in zip(
            extraction.state_variables, refs.read_by, refs.written_by
        )
    )

    return AnalyzedContract(
        name=extraction.contract_name,
        version=extraction.version,
        license=extraction.license,
        inherits_from=extraction.inherits_from,
        modifiers=tuple(m.name for m in extraction.modifiers),
        functions=tuple(functions),
        events=events,
        state_variables=state_variables,
        roles=role_table.build(),
        security_findings=scan(extraction),
        has_ownership=any("owner" in f.roles for f in functions),
        has_access_control=any("admin" in f.roles for f in functions),
    )


# ══════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════


def analyze_contract(text: str) -> AnalyzedContract:
    """
    Analyse a contract given as an interface list (JSON) or Solidity source.

    Raises
    ------
    FormatError
        When the text matches neither input shape.
    """
    extraction = extract(text)
    contract = assemble(extraction)
    logger.info(
        "Analyzed contract %s",
        contract.name,
        extra={
            "mode": extraction.mode,
            "functions": len(contract.functions),
            "events": len(contract.events),
            "state_variables": len(contract.state_variables),
            "findings": len(contract.security_findings),
        },
    )
    return contract


def analyze_interface(entries: list[Any]) -> AnalyzedContract:
    """Analyse an already-parsed interface list."""
    return assemble(extract_interface(entries))


def analyze_source(text: str) -> AnalyzedContract:
    """Analyse text known to be Solidity source, skipping the interface probe."""
    return assemble(extract_source(text))


# ══════════════════════════════════════════════════════════════
# BATCH ANALYSIS
# ══════════════════════════════════════════════════════════════


def analyze_batch(contracts: Iterable[tuple[str, str]]) -> BatchAnalysis:
    """
    Analyse several ``(name, source)`` pairs independently.

    Blank sources are skipped. A failing input is recorded in ``errors``
    without affecting the others; each analysed contract takes the name it
    was submitted under.

    Raises
    ------
    BatchAnalysisError
        When there is nothing to analyze, or when every input failed (the
        message then combines all per-input errors).
    """
    pending = [(name, source) for name, source in contracts if source.strip()]
    if not pending:
        raise BatchAnalysisError(NO_CONTRACTS_MESSAGE)

    analyses: list[NamedAnalysis] = []
    errors: list[str] = []
    for name, source in pending:
        try:
            contract = analyze_contract(source)
        except AppException as exc:
            logger.warning("Batch entry %s failed", name, extra={"error_code": exc.error_code})
            errors.append(f"Error analyzing {name}: {exc.message}")
            continue
        if name:
            contract = contract.model_copy(update={"name": name})
        analyses.append(NamedAnalysis(name=name or contract.name, contract=contract))

    if not analyses:
        raise BatchAnalysisError("\n".join(errors), errors)

    logger.info("Batch analysis finished", extra={"analyzed": len(analyses), "failed": len(errors)})
    return BatchAnalysis(contracts=tuple(analyses), errors=tuple(errors))
