"""
Role Classifier.

Assigns coarse access-control roles to functions from naming and guard
heuristics, derives each function's flow category, and groups functions
per role.
"""

from __future__ import annotations

from contractviz.models.contract import RoleRecord

OWNER_GUARD = "onlyOwner"
ADMIN_GUARD = "onlyAdmin"
DEFAULT_ROLES: tuple[str, ...] = ("user",)


def classify(function_name: str, scope_text: str) -> tuple[str, ...]:
    """
    Return the roles of one function, in rule order (owner, admin, user).

    *scope_text* is the function's scope slice, so guards and keywords that
    appear anywhere after the declaration count.
    """
    lowered = function_name.lower()
    roles: list[str] = []

    if OWNER_GUARD in scope_text or "owner" in lowered:
        roles.append("owner")

    if ADMIN_GUARD in scope_text or "admin" in lowered:
        roles.append("admin")

    if "user" in lowered or "view" in scope_text or "pure" in scope_text:
        roles.append("user")

    return tuple(roles) if roles else DEFAULT_ROLES


def flow_category(roles: tuple[str, ...], mutability: str) -> str:
    if "owner" in roles:
        return "owner"
    if "admin" in roles:
        return "admin"
    if mutability == "view":
        return "system"
    return "user"


class RoleTableBuilder:
    """Accumulates role -> functions for a single analysis run."""

    def __init__(self) -> None:
        self._functions: dict[str, list[str]] = {}

    def add(self, function_name: str, roles: tuple[str, ...]) -> None:
        for role in roles:
            self._functions.setdefault(role, []).append(function_name)

    def build(self) -> tuple[RoleRecord, ...]:
        # dicts keep insertion order, which is first-seen role order
        return tuple(
            RoleRecord(name=role, functions=tuple(functions))
            for role, functions in self._functions.items()
        )
