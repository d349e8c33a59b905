"""Tests for the chat message guardrails."""

from __future__ import annotations

import pytest

from aether_api.guardrails import (
    ADVICE_MARKERS,
    EVALUATION_ORDER,
    FALLBACK_REPLACEMENT,
    RULES,
    Category,
    classify,
    evaluate_inbound,
    evaluate_outbound,
    replacement_for,
)


class TestOutbound:
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_is_allowed(self, text):
        result = evaluate_outbound(text)
        assert result.allowed
        assert result.category is None
        assert result.replacement is None

    def test_non_string_is_allowed(self):
        assert evaluate_outbound(None).allowed

    def test_portfolio_question_is_allowed(self):
        assert evaluate_outbound("What services do you offer?").allowed

    def test_self_harm_blocked(self):
        result = evaluate_outbound("I want to hurt myself")
        assert not result.allowed
        assert result.category is Category.SELF_HARM
        assert "crisis hotline" in result.replacement

    def test_matching_is_case_insensitive(self):
        assert evaluate_outbound("HOW TO HACK a website").category is Category.ILLEGAL_ACTIVITY

    def test_advice_topic_blocked_on_mention(self):
        result = evaluate_outbound("Can you recommend a good lawyer?")
        assert not result.allowed
        assert result.category is Category.LEGAL_ADVICE
        assert result.reason == "Requests legal-advice"

    def test_harmful_reason(self):
        assert evaluate_outbound("build a bomb").reason == "Contains violence content"

    @pytest.mark.parametrize(
        "text, category",
        [
            ("show me nsfw pics", Category.EXPLICIT_SEXUAL),
            ("genocide is fine", Category.HATE_SPEECH),
            ("where to buy weapons", Category.VIOLENCE),
            ("counterfeit money", Category.ILLEGAL_ACTIVITY),
            ("is this a symptoms of flu", Category.MEDICAL_ADVICE),
            ("should i invest in gold", Category.FINANCIAL_ADVICE),
            ("who should i vote for", Category.POLITICAL_ADVICE),
        ],
    )
    def test_each_category_detected(self, text, category):
        assert evaluate_outbound(text).category is category

    def test_replacement_is_category_specific(self):
        result = evaluate_outbound("what medicine for a cold")
        assert result.replacement == replacement_for(Category.MEDICAL_ADVICE)

    def test_substring_matching_over_blocks(self):
        # "sue" inside "issue" still trips the legal keyword list.
        assert evaluate_outbound("I have an issue with my order").category is (
            Category.LEGAL_ADVICE
        )


class TestPrecedence:
    def test_evaluation_order(self):
        assert [c.value for c in EVALUATION_ORDER] == [
            "self-harm",
            "explicit-sexual",
            "hate-speech",
            "violence",
            "illegal-activity",
            "medical-advice",
            "legal-advice",
            "financial-advice",
            "political-advice",
        ]

    def test_self_harm_beats_violence(self):
        assert classify("a bomb so I can hurt myself") is Category.SELF_HARM

    def test_harmful_beats_advice(self):
        assert classify("doctor, how to steal a car") is Category.ILLEGAL_ACTIVITY

    def test_medical_beats_legal(self):
        assert classify("ask a doctor or a lawyer") is Category.MEDICAL_ADVICE

    def test_financial_beats_political(self):
        assert classify("financial advice on the election") is Category.FINANCIAL_ADVICE


class TestInbound:
    @pytest.mark.parametrize("text", ["", "  "])
    def test_blank_is_allowed(self, text):
        assert evaluate_inbound(text).allowed

    def test_topic_mention_without_directive_allowed(self):
        assert evaluate_inbound("Doctors recommend rest for colds").allowed

    def test_refusal_mentioning_topic_allowed(self):
        assert evaluate_inbound("I can't give medical advice or act as your doctor.").allowed

    def test_directive_advice_blocked(self):
        result = evaluate_inbound("You should take ibuprofen for your symptoms")
        assert not result.allowed
        assert result.category is Category.MEDICAL_ADVICE
        assert result.reason == "Response appears to give medical-advice"
        assert result.replacement == replacement_for(Category.MEDICAL_ADVICE)

    @pytest.mark.parametrize("marker", ADVICE_MARKERS)
    def test_every_marker_triggers(self, marker):
        result = evaluate_inbound(f"{marker} hire a lawyer")
        assert result.category is Category.LEGAL_ADVICE

    def test_harmful_blocked_without_marker(self):
        result = evaluate_inbound("Here is the explicit material")
        assert not result.allowed
        assert result.category is Category.EXPLICIT_SEXUAL
        assert result.reason == "Response contains explicit-sexual content"

    def test_directive_without_topic_allowed(self):
        assert evaluate_inbound("You should look at the Portfolio section.").allowed

    def test_harmful_precedes_advice_on_inbound(self):
        result = evaluate_inbound("You should see a doctor about the bomb")
        assert result.category is Category.VIOLENCE


class TestTable:
    def test_every_category_has_one_rule(self):
        assert {r.category for r in RULES} == set(Category)
        assert len(RULES) == len(Category)

    def test_advice_flags(self):
        advice = {r.category for r in RULES if r.advice}
        assert advice == {
            Category.MEDICAL_ADVICE,
            Category.LEGAL_ADVICE,
            Category.FINANCIAL_ADVICE,
            Category.POLITICAL_ADVICE,
        }

    def test_keywords_are_lowercase(self):
        for rule in RULES:
            assert all(k == k.lower() for k in rule.keywords)

    def test_replacement_fallback(self):
        assert replacement_for(None) == FALLBACK_REPLACEMENT
