"""
Versioned promotion rule table.

Thresholds are data. Rules are listed in ascending rank of their source role;
the evaluator applies the first rule whose source role matches the member's
current role and whose thresholds are all met.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from shepherd.features.growth.metrics import GrowthMetrics


@dataclass(frozen=True)
class PromotionRule:
    from_role: str
    to_role: str
    justification: str
    min_tenure_days: int = 0
    min_attendance_rate: float = 0.0
    min_ministry_activity: int = 0

    def is_satisfied_by(self, metrics: GrowthMetrics) -> bool:
        return (
            metrics.tenure_days >= self.min_tenure_days
            and metrics.attendance_rate >= self.min_attendance_rate
            and metrics.ministry_activity_count >= self.min_ministry_activity
        )


@dataclass(frozen=True)
class RuleSet:
    version: str
    rules: tuple[PromotionRule, ...]

    def __iter__(self) -> Iterator[PromotionRule]:
        return iter(self.rules)

    def rules_from(self, role: str) -> list[PromotionRule]:
        return [rule for rule in self.rules if rule.from_role == role]

    def is_reachable(self, from_role: str, to_role: str) -> bool:
        """True if a single rule moves ``from_role`` to ``to_role``."""
        return any(rule.to_role == to_role for rule in self.rules_from(from_role))


DEFAULT_RULES = RuleSet(
    version="2025-07",
    rules=(
        PromotionRule(
            from_role="newcomer",
            to_role="member",
            min_tenure_days=30,
            min_attendance_rate=75,
            justification="Consistent attendance for 30+ days",
        ),
        PromotionRule(
            from_role="member",
            to_role="worker",
            min_tenure_days=90,
            min_ministry_activity=2,
            min_attendance_rate=85,
            justification="Demonstrated leadership and evangelism",
        ),
        PromotionRule(
            from_role="worker",
            to_role="admin",
            min_tenure_days=365,
            min_ministry_activity=10,
            justification="Proven leadership and ministry impact",
        ),
    ),
)
