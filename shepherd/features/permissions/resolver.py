"""
Permission resolver.

Resolution order for ``allow(table, role, module, action)``:

1. unknown or missing role → deny
2. root (maximum-rank) role → allow, without consulting its grants
3. structured grant: full access on ``module`` or on the ``all`` wildcard
   allows; otherwise an action set on ``module``, then on ``all``, decides
4. legacy flattened flag ``<module>_<action>`` → allow
5. deny

Stage 4 is reached only when stage 3 has no opinion, i.e. neither the module
nor the wildcard carries a grant. An action set that omits the action denies
even if a legacy flag for it exists.
"""
from __future__ import annotations

from typing import Iterable

from shepherd.features.roles.grants import WILDCARD_MODULE, ActionSet, FullAccess
from shepherd.features.roles.table import RoleDefinition, RoleTable
from shepherd.utils import get_logger


log = get_logger(__name__)

DEFAULT_ACTION = "read"


def _structured_decision(role: RoleDefinition, module: str, action: str) -> bool | None:
    """
    Allow/deny from the grant map, or None when it has no opinion.

    Full access on the module or the wildcard allows. Otherwise an action set
    on the module decides, then one on the wildcard. Only absent keys and
    NoGrant leave the decision to the legacy stage.
    """
    grant = role.grants.get(module)
    wildcard = role.grants.get(WILDCARD_MODULE)
    if isinstance(grant, FullAccess) or isinstance(wildcard, FullAccess):
        return True
    for candidate in (grant, wildcard):
        if isinstance(candidate, ActionSet):
            return candidate.permits(action)
    return None


def _legacy_allows(role: RoleDefinition, module: str, action: str) -> bool:
    return f"{module}_{action}" in role.legacy_flags


def allow(table: RoleTable | None, role: str | None, module: str | None, action: str | None = DEFAULT_ACTION) -> bool:
    """
    Check whether ``role`` may perform ``action`` on ``module``.

    Never raises: missing table, role, or module degrade to deny.

    Args:
        table: Role table to resolve against
        role: Role identifier (case-insensitive)
        module: Module name (e.g. "users", "finances")
        action: Action name; "read" when not supplied

    Returns:
        True if allowed, False otherwise
    """
    if table is None:
        return False
    definition = table.get(role)
    if definition is None:
        log.debug(f"Deny {action} on {module}: unknown role {role!r}")
        return False

    if definition.name == table.root.name:
        return True

    if not isinstance(module, str) or not module.strip():
        return False
    module = module.strip().lower()
    action = (action or DEFAULT_ACTION).strip().lower() or DEFAULT_ACTION

    decision = _structured_decision(definition, module, action)
    if decision is not None:
        if not decision:
            log.debug(f"Deny {action} on {module} for role {definition.name}: not in its action set")
        return decision
    if _legacy_allows(definition, module, action):
        log.debug(f"Role {definition.name} granted {action} on {module} via legacy flag")
        return True

    log.debug(f"Deny {action} on {module} for role {definition.name}")
    return False


def allow_any(table: RoleTable | None, role: str | None, checks: Iterable[tuple[str, str]]) -> bool:
    """True if ``role`` passes at least one ``(module, action)`` check."""
    return any(allow(table, role, module, action) for module, action in checks)


def effective_permissions(
    table: RoleTable | None,
    role: str | None,
    catalogue: dict[str, tuple[str, ...]],
) -> dict[str, list[str]]:
    """
    Expand a role's grants against a module catalogue.

    Returns:
        {module: [allowed actions]} for every module with at least one allowed action
    """
    result: dict[str, list[str]] = {}
    for module, actions in catalogue.items():
        allowed = [a for a in actions if allow(table, role, module, a)]
        if allowed:
            result[module] = allowed
    return result
