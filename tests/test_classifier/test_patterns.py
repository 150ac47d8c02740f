"""Tests for the rule tables and tier evaluation order."""

import re

from inbox_triage.classifier.patterns import (
    BUSINESS_TIERS,
    REPLY_TIERS,
    TIME_TIERS,
    PatternRule,
    Tier,
    first_match,
    no_question_mark,
)
from inbox_triage.models import FOCUS_SUMMARY_TYPES


class TestTables:
    """Table shape: tier order and values."""

    def test_business_tier_order(self):
        assert [tier.name for tier in BUSINESS_TIERS] == ["high", "medium_high", "medium", "low"]
        assert [tier.value for tier in BUSINESS_TIERS] == [1.0, 0.7, 0.4, 0.0]

    def test_time_tier_order(self):
        assert [tier.name for tier in TIME_TIERS] == ["urgent", "soon", "planning", "casual"]
        assert [tier.value for tier in TIME_TIERS] == [1.0, 0.7, 0.4, 0.0]

    def test_reply_tiers(self):
        assert [tier.value for tier in REPLY_TIERS] == [True, False]

    def test_business_categories_are_valid(self):
        for tier in BUSINESS_TIERS:
            for rule in tier.rules:
                assert rule.category in FOCUS_SUMMARY_TYPES

    def test_praise_rules_are_guarded(self):
        assert BUSINESS_TIERS[-1].rules[0].guard is no_question_mark
        assert TIME_TIERS[-1].rules[0].guard is no_question_mark
        assert REPLY_TIERS[-1].rules[0].guard is no_question_mark


class TestPatternRule:
    """Matching and guard evaluation."""

    def test_guard_sees_original_text(self):
        seen = []

        def guard(text):
            seen.append(text)
            return True

        rule = PatternRule(re.compile(r"hello", re.IGNORECASE), guard=guard)
        assert rule.matches("HELLO World")
        assert seen == ["HELLO World"]

    def test_guard_not_called_without_match(self):
        calls = []
        rule = PatternRule(re.compile(r"hello"), guard=lambda text: calls.append(text) or True)
        assert not rule.matches("goodbye")
        assert calls == []

    def test_guard_rejects(self):
        rule = PatternRule(re.compile(r"love", re.IGNORECASE), guard=no_question_mark)
        assert rule.matches("I love it")
        assert not rule.matches("Do you love it?")


class TestFirstMatch:
    """First tier wins, then first rule within the tier."""

    def test_returns_tier_and_rule(self):
        tier, rule = first_match(BUSINESS_TIERS, "refund please")
        assert tier.name == "high"
        assert rule.category == "Refund"

    def test_none_when_nothing_matches(self):
        assert first_match(TIME_TIERS, "zzz") is None

    def test_custom_tiers(self):
        tiers = (
            Tier("a", 1.0, (PatternRule(re.compile("x")),)),
            Tier("b", 0.5, (PatternRule(re.compile("y")),)),
        )
        assert first_match(tiers, "y and x")[0].name == "a"
        assert first_match(tiers, "only y")[0].name == "b"
