"""
Promotion eligibility evaluation.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from shepherd.features.growth.metrics import GrowthMetrics
from shepherd.features.growth.rules import DEFAULT_RULES, RuleSet
from shepherd.features.roles.table import normalize_role
from shepherd.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class PromotionRecommendation:
    """A computed, not yet applied, role change."""
    member_id: str
    current_role: str
    recommended_role: str
    justification: str
    computed_at: datetime
    metrics: GrowthMetrics
    rules_version: str


def evaluate(
    member_id: str,
    current_role: str | None,
    metrics: GrowthMetrics,
    computed_at: datetime,
    rules: RuleSet = DEFAULT_RULES,
) -> PromotionRecommendation | None:
    """
    Recommend the next role for a member, or None.

    Only rules whose source role equals the current role are considered, in
    table order; the first satisfied rule wins. If that rule would keep the
    member in the same role, no recommendation is produced.
    """
    role = normalize_role(current_role)
    if role is None:
        return None

    for rule in rules.rules_from(role):
        if not rule.is_satisfied_by(metrics):
            continue
        if rule.to_role == role:
            log.warning(f"Rule {rule.from_role}->{rule.to_role} in {rules.version} is a no-op; suppressed")
            return None
        log.debug(f"Member {member_id}: {rule.from_role} -> {rule.to_role} ({rule.justification})")
        return PromotionRecommendation(
            member_id=member_id,
            current_role=role,
            recommended_role=rule.to_role,
            justification=rule.justification,
            computed_at=computed_at,
            metrics=metrics,
            rules_version=rules.version,
        )
    return None
