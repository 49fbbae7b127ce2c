"""
Immutable role table.

A RoleTable is built once (defaults, optional JSON file, tenant overrides) and
then handed to the resolver and the navigation filter. Exactly one role must
hold the maximum rank; that role is the root role.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from shepherd.core.exceptions import RoleTableError
from shepherd.features.roles.grants import Grant, split_grant_map
from shepherd.utils import get_logger


log = get_logger(__name__)


def normalize_role(role: str | None) -> str | None:
    """Canonical role identifier: stripped and lower-cased, or None."""
    if not isinstance(role, str):
        return None
    name = role.strip().lower()
    return name or None


@dataclass(frozen=True)
class RoleDefinition:
    """One rung of the role ladder and its grant map."""

    name: str
    rank: int
    display_name: str
    grants: Mapping[str, Grant] = field(default_factory=dict)
    legacy_flags: frozenset[str] = frozenset()
    description: str | None = None

    @classmethod
    def from_config(cls, name: str, raw: Mapping[str, Any]) -> "RoleDefinition":
        """
        Build a role from its configuration entry.

        Example entry:
            {"rank": 3, "display_name": "Worker/Leader",
             "permissions": {"attendance": true, "tasks": ["read", "update"]}}
        """
        role_name = normalize_role(name)
        if role_name is None:
            raise RoleTableError(f"Invalid role name {name!r}")
        try:
            rank = int(raw["rank"])
        except (KeyError, TypeError, ValueError):
            raise RoleTableError(f"Role '{role_name}' needs an integer rank")

        grants, legacy = split_grant_map(raw.get("permissions"))
        return cls(
            name=role_name,
            rank=rank,
            display_name=raw.get("display_name") or role_name.title(),
            grants=MappingProxyType(grants),
            legacy_flags=legacy,
            description=raw.get("description"),
        )


class RoleTable:
    """
    Read-only collection of role definitions for one deployment or tenant.

    Raises:
        RoleTableError: if names collide or the maximum rank is not unique
    """

    def __init__(self, roles: Iterable[RoleDefinition], version: str = "default"):
        by_name: dict[str, RoleDefinition] = {}
        for role in roles:
            if role.name in by_name:
                raise RoleTableError(f"Duplicate role '{role.name}'")
            by_name[role.name] = role
        if not by_name:
            raise RoleTableError("Role table is empty")

        top_rank = max(r.rank for r in by_name.values())
        top = [r for r in by_name.values() if r.rank == top_rank]
        if len(top) != 1:
            names = ", ".join(sorted(r.name for r in top))
            raise RoleTableError(f"Exactly one role may hold the maximum rank {top_rank}; found: {names}")

        self._roles = MappingProxyType(dict(sorted(by_name.items(), key=lambda kv: kv[1].rank)))
        self._root = top[0]
        self.version = version

    @property
    def root(self) -> RoleDefinition:
        return self._root

    def get(self, role: str | None) -> RoleDefinition | None:
        name = normalize_role(role)
        if name is None:
            return None
        return self._roles.get(name)

    def is_root(self, role: str | None) -> bool:
        return normalize_role(role) == self._root.name

    def rank_of(self, role: str | None) -> int | None:
        definition = self.get(role)
        return definition.rank if definition else None

    def ladder(self) -> list[RoleDefinition]:
        """Roles in ascending rank order."""
        return list(self._roles.values())

    def names(self) -> list[str]:
        return list(self._roles.keys())

    def with_overrides(self, overrides: Iterable[RoleDefinition], version: str) -> "RoleTable":
        """
        Return a new table where each override replaces the role of the same
        name (or adds a new role). The result is re-validated.
        """
        merged = dict(self._roles)
        for override in overrides:
            merged[override.name] = override
        return RoleTable(merged.values(), version=version)

    def __contains__(self, role: object) -> bool:
        return isinstance(role, str) and self.get(role) is not None

    def __iter__(self) -> Iterator[RoleDefinition]:
        return iter(self._roles.values())

    def __len__(self) -> int:
        return len(self._roles)

    def __repr__(self) -> str:
        return f"<RoleTable(version={self.version!r}, root={self._root.name!r}, roles={self.names()})>"


def build_role_table(config: Mapping[str, Mapping[str, Any]], version: str = "default") -> RoleTable:
    """Build a RoleTable from a ``{role_name: entry}`` mapping."""
    return RoleTable(
        (RoleDefinition.from_config(name, entry) for name, entry in config.items()),
        version=version,
    )


def load_role_table_file(path: str | Path) -> RoleTable:
    """
    Load a role table from a JSON file.

    The file holds either ``{"version": "...", "roles": {...}}`` or the bare
    ``{role_name: entry}`` mapping.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise RoleTableError(f"Cannot read role table {path}: {e}")

    if isinstance(data, Mapping) and "roles" in data:
        version = str(data.get("version") or path.stem)
        roles = data["roles"]
    else:
        version, roles = path.stem, data
    if not isinstance(roles, Mapping):
        raise RoleTableError(f"Role table {path} must map role names to entries")

    table = build_role_table(roles, version=version)
    log.info(f"Loaded role table {table.version!r} from {path} with roles {table.names()}")
    return table


def override_definition(base: RoleDefinition | None, name: str, raw: Mapping[str, Any]) -> RoleDefinition:
    """
    Build a tenant override on top of a base role.

    Fields missing from ``raw`` fall back to the base role's values.
    """
    if base is None:
        return RoleDefinition.from_config(name, raw)
    merged = base
    if raw.get("permissions") is not None:
        grants, legacy = split_grant_map(raw["permissions"])
        merged = replace(merged, grants=MappingProxyType(grants), legacy_flags=legacy)
    if raw.get("rank") is not None:
        merged = replace(merged, rank=int(raw["rank"]))
    if raw.get("display_name"):
        merged = replace(merged, display_name=raw["display_name"])
    if raw.get("description") is not None:
        merged = replace(merged, description=raw["description"])
    return merged
