"""
Grant variants for a role's module → permission map.

A stored grant map is a JSON object such as::

    {"users": true, "attendance": ["read", "create"], "tasks_read": true}

``true`` means full access to the module, a list is an explicit action set, and
a missing key means no access. ``true`` keys shaped like ``<module>_<action>``
are the legacy flattened form; they are also kept as a separate flag set so the
resolver can consult them in a second stage.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from shepherd.utils import get_logger


log = get_logger(__name__)

# Grant-map key that applies to every module
WILDCARD_MODULE = "all"


@dataclass(frozen=True)
class FullAccess:
    """Every action on the module is allowed."""

    def permits(self, action: str) -> bool:
        return True


@dataclass(frozen=True)
class ActionSet:
    """Only the listed actions are allowed."""

    actions: frozenset[str] = field(default_factory=frozenset)

    def permits(self, action: str) -> bool:
        return action in self.actions


@dataclass(frozen=True)
class NoGrant:
    """Explicit absence of access; behaves like a missing key."""

    def permits(self, action: str) -> bool:
        return False


Grant = Union[FullAccess, ActionSet, NoGrant]

FULL_ACCESS = FullAccess()
NO_GRANT = NoGrant()


def parse_grant(raw: Any) -> Grant:
    """
    Convert one stored grant value into a Grant.

    Accepts ``True``/``False``/``None``, a list/tuple/set of action names, or a
    mapping of action → bool (the shape some older role rows use). Anything else
    degrades to NoGrant so a malformed row can never open access.
    """
    if raw is True:
        return FULL_ACCESS
    if raw is None or raw is False:
        return NO_GRANT
    if isinstance(raw, (list, tuple, set, frozenset)):
        return ActionSet(frozenset(str(a).strip().lower() for a in raw if str(a).strip()))
    if isinstance(raw, Mapping):
        return ActionSet(frozenset(str(a).strip().lower() for a, allowed in raw.items() if allowed is True))
    log.warning(f"Unsupported grant value {raw!r}; treating as no access")
    return NO_GRANT


def split_grant_map(raw: Mapping[str, Any] | None) -> tuple[dict[str, Grant], frozenset[str]]:
    """
    Split a stored grant map into structured grants and legacy flags.

    Every key becomes a structured grant. Keys whose value is exactly ``True``
    and that contain an underscore are also collected as legacy flags, since
    the flattened ``<module>_<action>`` lookup only ever matched boolean true.

    Returns:
        (grants, legacy_flags)
    """
    grants: dict[str, Grant] = {}
    legacy: set[str] = set()
    for key, value in (raw or {}).items():
        name = str(key).strip().lower()
        if not name:
            continue
        grants[name] = parse_grant(value)
        if value is True and "_" in name:
            legacy.add(name)
    return grants, frozenset(legacy)


def grant_to_json(grant: Grant) -> Any:
    """Inverse of parse_grant for API responses and stored overrides."""
    if isinstance(grant, FullAccess):
        return True
    if isinstance(grant, ActionSet):
        return sorted(grant.actions)
    return False
