"""
Tests for override pattern matching and the principal value object.
"""

import pytest

from dare_backend.permissions.overrides import OverrideSpec, apply_overrides, normalize_pattern, pattern_matches
from dare_backend.permissions.principal import Principal


class TestPatternMatching:

    @pytest.mark.parametrize("pattern,role_name,expected", [
        ("mentor", "mentor", True),
        ("mentor", "MENTOR", True),
        ("Mentor", "mentor", True),
        ("mentor", "senior_mentor", False),
        ("*_mentor", "senior_mentor", True),
        ("*", "anything", True),
        ("mentor", None, False),
        ("mentor", "", False),
    ])
    def test_pattern_matches(self, pattern, role_name, expected):
        assert pattern_matches(pattern, role_name) is expected

    def test_empty_pattern(self):
        with pytest.raises(ValueError):
            normalize_pattern("  ")

    def test_apply_overrides_removes_denied_pairs(self):
        candidates = {("youth_profiles", "view"), ("youth_profiles", "create")}
        rules = [OverrideSpec("mentor", "youth_profiles", "create")]

        assert apply_overrides(candidates, rules, ["mentor"]) == {("youth_profiles", "view")}
        assert apply_overrides(candidates, rules, ["reviewer"]) == candidates

    def test_apply_overrides_ignores_other_effects(self):
        candidates = {("reports", "view")}
        rules = [OverrideSpec("reviewer", "reports", "view", effect="audit")]

        assert apply_overrides(candidates, rules, ["reviewer"]) == candidates


class TestPrincipal:

    def test_admin_label(self):
        assert Principal(user_id="u", legacy_role=" Admin ").is_admin is True
        assert Principal(user_id="u", legacy_role="administrator").is_admin is False
        assert Principal(user_id="u").is_admin is False

    def test_cache_key_uses_normalized_label(self):
        assert Principal(user_id="u", legacy_role="Mentor").cache_key() == ("u", "mentor")
        assert Principal(user_id="u", legacy_role="  ").cache_key() == ("u", None)
