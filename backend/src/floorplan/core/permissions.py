"""Role based permissions for restaurant members."""

from typing import Dict, FrozenSet

Permissions = Dict[str, FrozenSet[str]]

ROLES = ("owner", "admin", "manager", "staff")

_FULL = frozenset({"view", "create", "update", "delete"})

ROLE_PERMISSIONS: Dict[str, Permissions] = {
    "owner": {"rooms": _FULL, "tables": _FULL},
    "admin": {"rooms": _FULL, "tables": _FULL},
    "manager": {"rooms": _FULL, "tables": _FULL},
    "staff": {"rooms": frozenset({"view"}), "tables": frozenset({"view"})},
}


def has_permission(role: str, module: str, action: str) -> bool:
    """Check whether ``role`` may perform ``action`` on ``module``.

    Unknown roles and modules have no permissions.
    """
    return action in ROLE_PERMISSIONS.get(role, {}).get(module, frozenset())
