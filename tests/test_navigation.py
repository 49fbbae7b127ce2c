"""Feature visibility filter."""

from shepherd.features.navigation.features import FEATURES, feature, group_by_category, visible_features


def ids(descriptors) -> list[str]:
    return [d.id for d in descriptors]


class TestVisibleFeatures:
    def test_root_does_not_see_lower_role_only_screens(self) -> None:
        visible = ids(visible_features("pastor"))
        assert "church-settings" in visible
        assert "departments" not in visible
        assert "discipleship" not in visible
        assert "newcomer-welcome" not in visible
        assert "attendance" not in visible

    def test_admin_does_not_see_church_settings(self) -> None:
        visible = ids(visible_features("admin"))
        assert "manage-users" in visible
        assert "church-settings" not in visible

    def test_newcomer_sees_welcome_screens_without_notes(self) -> None:
        visible = ids(visible_features("Newcomer"))
        assert visible[0] == "dashboard"
        assert "newcomer-welcome" in visible
        assert "notes" not in visible
        assert "manage-users" not in visible

    def test_declared_order_is_preserved(self) -> None:
        visible = ids(visible_features("worker"))
        declared = [f.id for f in FEATURES if f.id in visible]
        assert visible == declared

    def test_duplicate_ids_are_emitted_once(self) -> None:
        features = (
            feature("events", "Events", "community", "member"),
            feature("events", "Events again", "community", "member"),
        )
        visible = visible_features("member", features)
        assert len(visible) == 1
        assert visible[0].label == "Events"

    def test_unknown_role_sees_nothing(self) -> None:
        assert visible_features("bishop") == ()
        assert visible_features(None) == ()
        assert visible_features("") == ()


class TestGrouping:
    def test_categories_in_first_seen_order(self) -> None:
        groups = group_by_category(visible_features("member"))
        categories = [category for category, _ in groups]
        assert categories == ["main", "growth", "community", "personal"]
        growth = dict(groups)["growth"]
        assert ids(growth) == ["discipleship", "my-soul-winning", "testimonies", "counseling"]
