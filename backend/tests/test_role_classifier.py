"""Tests for role classification, flow categories and the role table."""

import pytest

from contractviz.models.contract import RoleRecord
from contractviz.services.role_classifier import RoleTableBuilder, classify, flow_category


class TestClassify:
    @pytest.mark.parametrize(
        "name, scope, expected",
        [
            ("transferOwnership", "", ("owner",)),
            ("withdraw", "function withdraw() public onlyOwner {", ("owner",)),
            ("setAdminFee", "", ("admin",)),
            ("pause", "modifier use: onlyAdmin", ("admin",)),
            ("getUserBalance", "", ("user",)),
            ("total", "function total() public view returns (uint256)", ("user",)),
            ("hash", "function hash() public pure returns (bytes32)", ("user",)),
        ],
    )
    def test_single_rule(self, name, scope, expected):
        assert classify(name, scope) == expected

    def test_rules_accumulate_in_fixed_order(self):
        assert classify("foo", "view onlyAdmin onlyOwner") == ("owner", "admin", "user")

    def test_default_role_is_user(self):
        assert classify("foo", "function foo() public { }") == ("user",)

    def test_guard_match_is_case_sensitive(self):
        assert classify("foo", "onlyowner") == ("user",)


class TestFlowCategory:
    @pytest.mark.parametrize(
        "roles, mutability, expected",
        [
            (("owner", "user"), "view", "owner"),
            (("admin", "user"), "nonpayable", "admin"),
            (("user",), "view", "system"),
            (("user",), "pure", "user"),
            (("user",), "payable", "user"),
        ],
    )
    def test_priority(self, roles, mutability, expected):
        assert flow_category(roles, mutability) == expected


class TestRoleTable:
    def test_first_seen_role_order(self):
        table = RoleTableBuilder()
        table.add("deposit", ("user",))
        table.add("withdraw", ("owner", "user"))
        table.add("setAdmin", ("admin",))
        assert table.build() == (
            RoleRecord(name="user", functions=("deposit", "withdraw")),
            RoleRecord(name="owner", functions=("withdraw",)),
            RoleRecord(name="admin", functions=("setAdmin",)),
        )

    def test_builders_do_not_share_state(self):
        first = RoleTableBuilder()
        first.add("a", ("owner",))
        second = RoleTableBuilder()
        assert second.build() == ()
        assert len(first.build()) == 1
