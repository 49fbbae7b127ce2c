"""
Feature visibility.

A feature is visible to a role only when the role is listed on the feature.
This is set membership, not rank: the root role does not see worker-only,
member-only or newcomer-only screens unless a deployment lists it there.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from shepherd.features.roles.table import normalize_role


@dataclass(frozen=True)
class FeatureDescriptor:
    id: str
    label: str
    roles: frozenset[str]
    category: str


def feature(id: str, label: str, category: str, *roles: str) -> FeatureDescriptor:
    return FeatureDescriptor(id=id, label=label, roles=frozenset(roles), category=category)


_EVERYONE = ("pastor", "admin", "worker", "member", "newcomer")

# Declared order is display order
FEATURES: tuple[FeatureDescriptor, ...] = (
    feature("dashboard", "Dashboard", "main", *_EVERYONE),

    feature("manage-users", "Manage Users", "administration", "pastor", "admin"),
    feature("invite-users", "Invite Users", "administration", "pastor", "admin"),
    feature("user-promotions", "User Promotions", "administration", "pastor", "admin"),
    feature("church-settings", "Church Settings", "administration", "pastor"),
    feature("finance-dashboard", "Finance Dashboard", "administration", "pastor", "admin"),
    feature("analytics", "Analytics & Reports", "administration", "pastor", "admin"),
    feature("audit-trail", "Audit Trail", "administration", "pastor", "admin"),
    feature("registration-links", "Registration Links", "administration", "pastor", "admin"),

    feature("departments", "My Department", "ministry", "worker"),
    feature("department-attendance", "Department Attendance", "ministry", "worker"),
    feature("follow-ups", "Follow-ups", "ministry", "worker"),
    feature("department-reports", "Department Reports", "ministry", "worker"),

    feature("discipleship", "Discipleship Courses", "growth", "member"),
    feature("my-soul-winning", "My Soul Winning", "growth", "member"),
    feature("testimonies", "Testimonies", "growth", "member"),
    feature("counseling", "Counseling Sessions", "growth", "member"),

    feature("newcomer-welcome", "Welcome Center", "welcome", "newcomer"),
    feature("devotionals", "Daily Devotionals", "welcome", "newcomer"),
    feature("newcomer-forms", "Registration Forms", "welcome", "newcomer"),

    feature("events", "Events & Calendar", "community", *_EVERYONE),
    feature("prayers", "Prayer Wall", "community", *_EVERYONE),
    feature("announcements", "Announcements", "community", *_EVERYONE),
    feature("attendance", "My Attendance", "community", "worker", "member", "newcomer"),
    feature("notifications", "Notifications", "community", *_EVERYONE),

    feature("my-profile", "My Profile", "personal", *_EVERYONE),
    feature("notes", "Personal Notes", "personal", "pastor", "admin", "worker", "member"),
    feature("settings", "Settings", "personal", *_EVERYONE),
)


def visible_features(
    role: str | None,
    features: Iterable[FeatureDescriptor] = FEATURES,
) -> tuple[FeatureDescriptor, ...]:
    """
    Features the role may see, in declared order, each id at most once.

    Unknown or missing roles see nothing.
    """
    name = normalize_role(role)
    if name is None:
        return ()
    seen: set[str] = set()
    visible: list[FeatureDescriptor] = []
    for descriptor in features:
        if descriptor.id in seen:
            continue
        if name in {r.lower() for r in descriptor.roles}:
            seen.add(descriptor.id)
            visible.append(descriptor)
    return tuple(visible)


def group_by_category(descriptors: Sequence[FeatureDescriptor]) -> list[tuple[str, list[FeatureDescriptor]]]:
    """Group for display; categories appear in order of their first feature."""
    groups: dict[str, list[FeatureDescriptor]] = {}
    for descriptor in descriptors:
        groups.setdefault(descriptor.category, []).append(descriptor)
    return list(groups.items())
