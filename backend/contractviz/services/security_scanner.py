"""
Security Heuristics.

Scans for a small, ordered catalog of risky patterns and reports findings
attributed to the functions whose scope slice contains them. Each rule runs
independently of the others; new primitive rules are appended to
PRIMITIVE_RULES and never reorder existing ones.
"""

from __future__ import annotations

from dataclasses import dataclass

from contractviz.models.contract import SecurityFinding
from contractviz.services.pattern_extractor import ExtractionResult
from contractviz.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PrimitiveRule:
    """A contract-wide rule triggered by any of *tokens* appearing in the text."""

    tokens: tuple[str, ...]
    severity: str
    description: str
    recommendation: str
    location: str = "Contract"

    def matches(self, text: str) -> bool:
        return any(token in text for token in self.tokens)


PRIMITIVE_RULES: tuple[PrimitiveRule, ...] = (
    PrimitiveRule(
        tokens=("selfdestruct", "suicide"),
        severity="High",
        description="Contract uses selfdestruct/suicide",
        recommendation="Avoid using selfdestruct as it can be dangerous and is deprecated.",
    ),
    PrimitiveRule(
        tokens=("tx.origin",),
        severity="High",
        description="Usage of tx.origin found",
        recommendation="Use msg.sender instead of tx.origin for authentication.",
    ),
)


def _payable_findings(extraction: ExtractionResult) -> list[SecurityFinding]:
    return [
        SecurityFinding(
            severity="Medium",
            description=f"Payable function '{func.name}' found",
            location=f"Function: {func.name}",
            recommendation="Ensure proper access controls and value validation are in place.",
            affected_functions=(func.name,),
        )
        for func in extraction.functions
        if func.mutability == "payable"
    ]


def scan(
    extraction: ExtractionResult,
    rules: tuple[PrimitiveRule, ...] = PRIMITIVE_RULES,
) -> tuple[SecurityFinding, ...]:
    """Apply the payable rule, then every primitive rule, in catalog order."""
    findings = _payable_findings(extraction)

    for rule in rules:
        if not rule.matches(extraction.text):
            continue
        affected = dict.fromkeys(
            func.name
            for func in extraction.functions
            if rule.matches(extraction.scope_of(func))
        )
        findings.append(SecurityFinding(
            severity=rule.severity,
            description=rule.description,
            location=rule.location,
            recommendation=rule.recommendation,
            affected_functions=tuple(affected),
        ))

    if findings:
        logger.debug("Security scan produced %d finding(s)", len(findings))
    return tuple(findings)
