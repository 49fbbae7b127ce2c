"""Promotion eligibility evaluation."""

from datetime import datetime, timedelta, timezone

import pytest

from shepherd.features.growth.evaluator import evaluate
from shepherd.features.growth.metrics import ActivityCounters, GrowthMetrics, metrics_for
from shepherd.features.growth.rules import DEFAULT_RULES, PromotionRule, RuleSet

NOW = datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)


def metrics(tenure: int, rate: float = 0.0, ministry: int = 0) -> GrowthMetrics:
    return GrowthMetrics(tenure_days=tenure, attendance_rate=rate, ministry_activity_count=ministry)


class TestDefaultRules:
    def test_newcomer_with_steady_attendance_becomes_member(self) -> None:
        m = metrics_for(NOW - timedelta(days=31), ActivityCounters(present_count=5), NOW)
        rec = evaluate("m1", "newcomer", m, NOW)
        assert rec is not None
        assert rec.current_role == "newcomer"
        assert rec.recommended_role == "member"
        assert rec.justification == "Consistent attendance for 30+ days"
        assert rec.rules_version == DEFAULT_RULES.version
        assert rec.metrics == m
        assert rec.computed_at == NOW

    def test_member_short_of_ninety_days_gets_nothing(self) -> None:
        assert evaluate("m2", "member", metrics(89, 100.0, 50), NOW) is None

    def test_member_with_ministry_and_attendance_becomes_worker(self) -> None:
        rec = evaluate("m3", "member", metrics(90, 85.0, 2), NOW)
        assert rec.recommended_role == "worker"
        assert rec.justification == "Demonstrated leadership and evangelism"

    def test_member_below_attendance_threshold(self) -> None:
        assert evaluate("m3", "member", metrics(200, 84.9, 10), NOW) is None

    def test_worker_ignores_attendance(self) -> None:
        rec = evaluate("m4", "worker", metrics(365, 0.0, 10), NOW)
        assert rec.recommended_role == "admin"
        assert rec.justification == "Proven leadership and ministry impact"

    @pytest.mark.parametrize("role", ["admin", "pastor", "bishop", None, ""])
    def test_roles_without_rules_get_nothing(self, role) -> None:
        assert evaluate("m5", role, metrics(5000, 100.0, 500), NOW) is None

    def test_role_is_matched_case_insensitively(self) -> None:
        rec = evaluate("m6", " Newcomer", metrics(30, 75.0), NOW)
        assert rec.current_role == "newcomer"


class TestProperties:
    def test_evaluation_is_idempotent(self) -> None:
        m = metrics(120, 90.0, 3)
        assert evaluate("m", "member", m, NOW) == evaluate("m", "member", m, NOW)
        assert evaluate("m", "member", metrics(10), NOW) == evaluate("m", "member", metrics(10), NOW)

    @pytest.mark.parametrize("role,rate,ministry", [("newcomer", 80.0, 0), ("worker", 0.0, 12)])
    def test_longer_tenure_never_revokes_eligibility(self, role: str, rate: float, ministry: int) -> None:
        eligible = [evaluate("m", role, metrics(t, rate, ministry), NOW) is not None for t in range(0, 800, 7)]
        first = eligible.index(True)
        assert all(eligible[first:])


class TestRuleSets:
    def test_first_satisfied_rule_wins(self) -> None:
        rules = RuleSet("test", (
            PromotionRule("member", "worker", "strict", min_tenure_days=400),
            PromotionRule("member", "deacon", "loose", min_tenure_days=10),
            PromotionRule("member", "elder", "looser", min_tenure_days=1),
        ))
        rec = evaluate("m", "member", metrics(20), NOW, rules)
        assert rec.recommended_role == "deacon"
        assert rec.rules_version == "test"

    def test_rule_targeting_current_role_is_suppressed(self) -> None:
        rules = RuleSet("loop", (PromotionRule("member", "member", "again"),))
        assert evaluate("m", "member", metrics(100), NOW, rules) is None

    def test_is_reachable(self) -> None:
        assert DEFAULT_RULES.is_reachable("newcomer", "member")
        assert DEFAULT_RULES.is_reachable("worker", "admin")
        assert not DEFAULT_RULES.is_reachable("newcomer", "worker")
        assert not DEFAULT_RULES.is_reachable("admin", "pastor")
