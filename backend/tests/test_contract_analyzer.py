"""Tests for model assembly, single-contract analysis and batch analysis."""

import json

import pytest
from pydantic import ValidationError

from contractviz.middleware.error_handler import BatchAnalysisError, FormatError
from contractviz.models.contract import AnalyzedContract, Parameter
from contractviz.services.contract_analyzer import (
    NO_CONTRACTS_MESSAGE,
    analyze_batch,
    analyze_contract,
    analyze_interface,
    analyze_source,
)


def assert_references_resolve(contract: AnalyzedContract) -> None:
    """Every name a record points at must be a declared function."""
    names = contract.function_names()
    for func in contract.functions:
        assert set(func.calls) <= names
    for event in contract.events:
        assert set(event.emitted_by) <= names
    for var in contract.state_variables:
        assert set(var.read_by) <= names
        assert set(var.written_by) <= names
    for role in contract.roles:
        assert set(role.functions) <= names
    for finding in contract.security_findings:
        assert set(finding.affected_functions) <= names


# ── Scenarios ─────────────────────────────────────────────────


class TestScenarios:
    def test_single_view_getter(self, getter_source):
        contract = analyze_contract(getter_source)
        assert contract.name == "Foo"
        (func,) = contract.functions
        assert func.name == "bar"
        assert func.visibility == "public"
        assert func.mutability == "view"
        assert func.outputs == (Parameter(name="", type="uint256"),)
        assert func.roles == ("user",)
        assert func.flow_category == "system"
        assert contract.security_findings == ()

    def test_owner_guard(self, guarded_source):
        contract = analyze_contract(guarded_source)
        (func,) = contract.functions
        assert func.roles == ("owner",)
        assert func.flow_category == "owner"
        assert contract.has_ownership is True
        assert contract.has_access_control is False

    def test_selfdestruct_yields_one_high_finding(self, doomed_source):
        contract = analyze_contract(doomed_source)
        high = [f for f in contract.security_findings if f.severity == "High"]
        assert len(high) == 1
        assert "destroy" in high[0].affected_functions

    def test_interface_getter(self):
        text = json.dumps([
            {
                "type": "function",
                "name": "get",
                "inputs": [],
                "outputs": [{"type": "uint256"}],
                "stateMutability": "view",
            }
        ])
        (func,) = analyze_contract(text).functions
        assert func.name == "get"
        assert func.modifiers == ()
        assert func.outputs == (Parameter(name="", type="uint256"),)
        assert func.roles == ("user",)
        assert func.flow_category == "system"

    @pytest.mark.parametrize("text", ["", "  \n\t "])
    def test_blank_input(self, text):
        with pytest.raises(FormatError):
            analyze_contract(text)

    def test_deeply_nested_input_is_a_format_error(self):
        with pytest.raises(FormatError) as exc_info:
            analyze_contract("[" * 50_000)
        assert exc_info.value.reason == "input nests too deeply"


# ── Assembly ──────────────────────────────────────────────────


class TestAssembly:
    def test_vault_roles(self, vault_source):
        contract = analyze_contract(vault_source)
        roles = {f.name: f.roles for f in contract.functions}
        assert roles == {
            "deposit": ("owner", "user"),
            "withdraw": ("owner", "user"),
            "setAdmin": ("owner", "admin", "user"),
            "balance": ("user",),
        }
        assert [r.name for r in contract.roles] == ["owner", "user", "admin"]
        assert contract.roles[2].functions == ("setAdmin",)

    def test_vault_flags_and_metadata(self, vault_source):
        contract = analyze_contract(vault_source)
        assert contract.has_ownership is True
        assert contract.has_access_control is True
        assert contract.modifiers == ("onlyAdmin",)
        assert contract.inherits_from == ("Ownable", "ERC20")
        assert contract.functions[0].is_payable is True
        assert not any(f.is_payable for f in contract.functions[1:])

    def test_every_function_has_a_role(self, all_sources):
        for text in all_sources:
            for func in analyze_contract(text).functions:
                assert len(func.roles) >= 1

    def test_references_resolve(self, all_sources):
        for text in all_sources:
            assert_references_resolve(analyze_contract(text))

    def test_derived_flags_match_roles(self, all_sources):
        for text in all_sources:
            contract = analyze_contract(text)
            assert contract.has_ownership == any("owner" in f.roles for f in contract.functions)
            assert contract.has_access_control == any("admin" in f.roles for f in contract.functions)

    def test_analysis_is_idempotent(self, all_sources):
        for text in all_sources:
            first = analyze_contract(text)
            second = analyze_contract(text)
            assert first == second
            assert first.model_dump_json() == second.model_dump_json()

    def test_result_is_immutable(self, getter_source):
        contract = analyze_contract(getter_source)
        with pytest.raises(ValidationError):
            contract.name = "Other"

    def test_simple_storage_interface(self, simple_storage_abi):
        contract = analyze_interface(simple_storage_abi)
        retrieve, store = contract.functions
        assert retrieve.flow_category == "system"
        assert store.roles == ("user",)
        assert store.flow_category == "user"
        assert contract.state_variables == ()

    def test_analyze_source_rejects_prose(self):
        with pytest.raises(FormatError):
            analyze_source("nothing to see here")


# ── Batch ─────────────────────────────────────────────────────


class TestBatch:
    def test_partial_failure_is_isolated(self, getter_source, vault_source):
        result = analyze_batch([
            ("First", getter_source),
            ("Skipped", "   "),
            ("Broken", "not a contract"),
            ("", vault_source),
        ])
        assert [a.name for a in result.contracts] == ["First", "Vault"]
        assert result.contracts[0].contract.name == "First"
        assert result.contracts[1].contract.name == "Vault"
        assert result.errors == (
            "Error analyzing Broken: Invalid contract format: no contract declarations found in source text",
        )
        assert result.combined_error == result.errors[0]

    def test_deeply_nested_input_does_not_sink_the_batch(self, getter_source):
        result = analyze_batch([("Good", getter_source), ("Deep", "[" * 50_000)])
        assert [a.name for a in result.contracts] == ["Good"]
        assert result.errors == ("Error analyzing Deep: Invalid contract format: input nests too deeply",)

    def test_combined_error_is_none_without_failures(self, getter_source, vault_source):
        result = analyze_batch([("A", getter_source), ("B", vault_source)])
        assert result.errors == ()
        assert result.combined_error is None

    def test_everything_blank(self):
        with pytest.raises(BatchAnalysisError) as exc_info:
            analyze_batch([("A", ""), ("B", "  ")])
        assert exc_info.value.message == NO_CONTRACTS_MESSAGE

    def test_empty_batch(self):
        with pytest.raises(BatchAnalysisError):
            analyze_batch([])

    def test_everything_fails(self):
        with pytest.raises(BatchAnalysisError) as exc_info:
            analyze_batch([("A", "nope"), ("B", '{"x": 1}')])
        assert exc_info.value.errors == [
            "Error analyzing A: Invalid contract format: no contract declarations found in source text",
            "Error analyzing B: Invalid contract format: JSON input must be an interface list",
        ]
        assert exc_info.value.message == "\n".join(exc_info.value.errors)
