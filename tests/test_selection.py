"""
Tests for subscription selection and threshold resolution.
"""

import logging

import pytest

from storage_quota_audit.config import AuditConfig, SelectionMode
from storage_quota_audit.errors import NoMatchingSubscriptions
from storage_quota_audit.models import Subscription
from storage_quota_audit.selection import resolve_threshold, select_subscriptions


@pytest.fixture
def subscriptions():
    return [
        Subscription(id="sub-1", name="Sub1", tags={"quota": "20"}),
        Subscription(id="sub-2", name="Sub2", tags={}),
        Subscription(id="sub-3", name="Sub3", tags={"quota": "bad"}),
        Subscription(id="sub-4", name="Sub4", tags=None),
    ]


class TestSelectSubscriptions:
    """Selection precedence and filtering."""

    def test_specific_ids_keep_input_order(self, subscriptions):
        config = AuditConfig(selection_mode=SelectionMode.SPECIFIC_IDS,
                             subscription_ids=frozenset({"sub-3", "sub-1"}))
        selected = select_subscriptions(subscriptions, config)
        assert [s.id for s in selected] == ["sub-1", "sub-3"]

    def test_specific_ids_win_over_all_with_warning(self, subscriptions, caplog):
        config = AuditConfig(selection_mode=SelectionMode.SPECIFIC_IDS,
                             subscription_ids=frozenset({"sub-1"}),
                             all_subscriptions_requested=True)
        with caplog.at_level(logging.WARNING):
            selected = select_subscriptions(subscriptions, config)
        assert [s.id for s in selected] == ["sub-1"]
        assert "specific ids only" in caplog.text

    def test_missing_specific_id_is_warned(self, subscriptions, caplog):
        config = AuditConfig(selection_mode=SelectionMode.SPECIFIC_IDS,
                             subscription_ids=frozenset({"sub-1", "sub-404"}))
        with caplog.at_level(logging.WARNING):
            selected = select_subscriptions(subscriptions, config)
        assert [s.id for s in selected] == ["sub-1"]
        assert "sub-404" in caplog.text

    def test_specific_mode_without_ids_falls_back_to_tagged(self, subscriptions):
        config = AuditConfig(tag_name="quota", selection_mode=SelectionMode.SPECIFIC_IDS)
        selected = select_subscriptions(subscriptions, config)
        assert [s.id for s in selected] == ["sub-1", "sub-3"]

    def test_all_subscriptions(self, subscriptions):
        config = AuditConfig(selection_mode=SelectionMode.ALL_SUBSCRIPTIONS)
        assert select_subscriptions(subscriptions, config) == subscriptions

    def test_tagged_only_requires_the_key(self, subscriptions):
        config = AuditConfig(tag_name="quota", selection_mode=SelectionMode.TAGGED_ONLY)
        selected = select_subscriptions(subscriptions, config)
        # Sub3 has an unparseable value but still carries the key
        assert [s.name for s in selected] == ["Sub1", "Sub3"]

    def test_empty_selection_raises(self, subscriptions):
        config = AuditConfig(tag_name="costcenter")
        with pytest.raises(NoMatchingSubscriptions):
            select_subscriptions(subscriptions, config)

    def test_no_subscriptions_at_all_raises(self):
        config = AuditConfig(selection_mode=SelectionMode.ALL_SUBSCRIPTIONS)
        with pytest.raises(NoMatchingSubscriptions):
            select_subscriptions([], config)


class TestResolveThreshold:
    """Threshold tag parsing with default fallback."""

    def test_parsed_tag_value(self):
        sub = Subscription(id="s", name="S", tags={"quota": "20"})
        assert resolve_threshold(sub, "quota", 10) == 20

    def test_whitespace_around_value_is_ignored(self):
        sub = Subscription(id="s", name="S", tags={"quota": " 250 "})
        assert resolve_threshold(sub, "quota", 10) == 250

    def test_missing_tag_uses_default(self):
        sub = Subscription(id="s", name="S", tags={"owner": "team-a"})
        assert resolve_threshold(sub, "quota", 10) == 10

    def test_missing_tag_map_uses_default(self):
        sub = Subscription(id="s", name="S", tags=None)
        assert resolve_threshold(sub, "quota", 10) == 10

    @pytest.mark.parametrize("value", ["bad", "12.5", "", "10GB"])
    def test_non_integer_value_uses_default(self, value, caplog):
        sub = Subscription(id="s", name="S", tags={"quota": value})
        with caplog.at_level(logging.WARNING):
            assert resolve_threshold(sub, "quota", 10) == 10
        assert "non-integer" in caplog.text
