"""Tests for call, storage and emission reference resolution."""

import json

from contractviz.services.cross_reference import resolve
from contractviz.services.pattern_extractor import extract


class TestCalls:
    def test_scope_over_includes_later_declarations(self, vault_source):
        refs = resolve(extract(vault_source))
        assert refs.calls == (
            ("withdraw", "setAdmin", "balance"),
            ("setAdmin", "balance"),
            ("balance",),
            (),
        )

    def test_self_reference_is_not_a_call(self):
        refs = resolve(extract("contract R { function loop() public { loop(); } }"))
        assert refs.calls == ((),)

    def test_interface_entries_do_not_call_each_other(self, simple_storage_text):
        refs = resolve(extract(simple_storage_text))
        assert refs.calls == ((), ())


class TestStorageAccess:
    def test_reads_and_writes(self, vault_source):
        refs = resolve(extract(vault_source))
        total, admin, fee = range(3)
        assert refs.read_by[total] == ("deposit", "withdraw", "setAdmin", "balance")
        assert refs.written_by[total] == ("deposit", "withdraw")
        assert refs.written_by[admin] == ("deposit", "withdraw", "setAdmin")
        assert refs.read_by[fee] == ()
        assert refs.written_by[fee] == ()

    def test_compound_assignment_is_not_a_write(self):
        source = """
        contract Counter {
            uint256 public count;
            function bump() public { count += 1; }
        }
        """
        refs = resolve(extract(source))
        assert refs.read_by == (("bump",),)
        assert refs.written_by == ((),)


class TestEmissions:
    def test_emitted_event_is_attributed_to_every_function(self, vault_source):
        refs = resolve(extract(vault_source))
        everyone = ("deposit", "withdraw", "setAdmin", "balance")
        assert refs.emitted_by == (everyone, everyone)

    def test_declared_but_never_emitted(self):
        source = """
        contract Quiet {
            event Ping(uint256 value);
            function run() public { }
        }
        """
        refs = resolve(extract(source))
        assert refs.emitted_by == ((),)

    def test_interface_event_matches_names_in_its_entry(self):
        entries = [
            {"type": "function", "name": "mint", "inputs": [], "outputs": []},
            {"type": "function", "name": "burn", "inputs": [], "outputs": []},
            {"type": "event", "name": "mintCompleted", "inputs": []},
        ]
        refs = resolve(extract(json.dumps(entries)))
        assert refs.emitted_by == (("mint",),)
