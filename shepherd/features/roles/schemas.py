"""
Pydantic schemas for role table responses and tenant overrides.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from shepherd.features.roles.grants import grant_to_json
from shepherd.features.roles.table import RoleDefinition, RoleTable


class RoleResponse(BaseModel):
    name: str
    rank: int
    display_name: str
    description: Optional[str] = None
    is_root: bool = False
    permissions: Dict[str, Any] = Field(default_factory=dict)
    legacy_flags: List[str] = Field(default_factory=list)

    @classmethod
    def from_definition(cls, definition: RoleDefinition, table: RoleTable) -> "RoleResponse":
        return cls(
            name=definition.name,
            rank=definition.rank,
            display_name=definition.display_name,
            description=definition.description,
            is_root=table.is_root(definition.name),
            permissions={module: grant_to_json(grant) for module, grant in definition.grants.items()},
            legacy_flags=sorted(definition.legacy_flags),
        )


class RoleTableResponse(BaseModel):
    version: str
    root: str
    roles: List[RoleResponse]


class RoleOverrideRequest(BaseModel):
    """
    Tenant override of one role. Omitted fields keep the configured value.

    permissions replaces the whole grant map, e.g.
    {"attendance": true, "finances": ["read"]}
    """
    rank: Optional[int] = Field(None, ge=0)
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Optional[Dict[str, Any]] = None
