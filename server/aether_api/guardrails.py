"""Chat guardrails: keyword classifier for user and model text.

Two checks share one category table:

1. Outbound (user -> model): any keyword hit blocks. The user's intent is
   unknown and a false positive only costs a rephrase.
2. Inbound (model -> user): harmful categories block on a keyword hit;
   advice categories block only when an advice marker ("you should", ...)
   also appears, so the model can still say it can't give medical advice.

Categories are evaluated in table order and the first hit wins:

    self-harm, explicit-sexual, hate-speech, violence, illegal-activity,
    medical-advice, legal-advice, financial-advice, political-advice

Matching is case-insensitive substring matching. Both checks are pure,
total functions: they never raise and no match means allowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

log = logging.getLogger(__name__)


class Category(str, Enum):
    SELF_HARM = "self-harm"
    EXPLICIT_SEXUAL = "explicit-sexual"
    HATE_SPEECH = "hate-speech"
    VIOLENCE = "violence"
    ILLEGAL_ACTIVITY = "illegal-activity"
    MEDICAL_ADVICE = "medical-advice"
    LEGAL_ADVICE = "legal-advice"
    FINANCIAL_ADVICE = "financial-advice"
    POLITICAL_ADVICE = "political-advice"


@dataclass(frozen=True, slots=True)
class CategoryRule:
    """One row of the classifier table."""

    category: Category
    keywords: tuple[str, ...]
    replacement: str
    advice: bool = False  # inbound hits also need an advice marker


@dataclass(frozen=True, slots=True)
class GuardrailResult:
    allowed: bool
    category: Category | None = None
    replacement: str | None = None
    reason: str | None = None


ALLOWED = GuardrailResult(allowed=True)

ADVICE_MARKERS: tuple[str, ...] = (
    "you should",
    "i recommend",
    "you need to",
    "you must",
    "take this",
    "use this",
)

FALLBACK_REPLACEMENT = (
    "I'm a portfolio assistant focused on Studio Aether's work and services. "
    "I can't help with that topic. Would you like to know about the portfolio, "
    "services, or booking instead?"
)

# ── Category table (evaluation order) ────────────────────────────────

RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        Category.SELF_HARM,
        (
            "suicide",
            "kill myself",
            "end my life",
            "self harm",
            "cut myself",
            "hurt myself",
            "take my life",
            "end it all",
            "not want to live",
        ),
        "I'm a portfolio assistant focused on Studio Aether's work and services. "
        "I can't help with that topic. If you're in crisis, please contact a "
        "mental health professional or crisis hotline.",
    ),
    CategoryRule(
        Category.EXPLICIT_SEXUAL,
        (
            "porn",
            "pornography",
            "explicit",
            "xxx",
            "nsfw",
            "sexual content",
            "nude",
            "naked",
            "sexually explicit",
        ),
        "I'm a portfolio assistant and can't help with that type of content. "
        "Would you like to know about Studio Aether's services or view the portfolio?",
    ),
    CategoryRule(
        Category.HATE_SPEECH,
        ("hate", "kill all", "exterminate", "genocide"),
        "I'm a portfolio assistant and can't engage with that type of content. "
        "I'm here to help with Studio Aether's portfolio, services, or booking.",
    ),
    CategoryRule(
        Category.VIOLENCE,
        (
            "how to kill",
            "how to murder",
            "how to harm",
            "weapons",
            "bomb",
            "explosive",
            "how to attack",
            "violence against",
        ),
        "I'm a portfolio assistant and can't provide information about that. "
        "Would you like to learn about Studio Aether's design work or services?",
    ),
    CategoryRule(
        Category.ILLEGAL_ACTIVITY,
        (
            "how to hack",
            "illegal drugs",
            "how to steal",
            "how to scam",
            "counterfeit",
            "illegal activities",
        ),
        "I'm a portfolio assistant and can't assist with that. I focus on Studio "
        "Aether's portfolio and services. How can I help you with that?",
    ),
    CategoryRule(
        Category.MEDICAL_ADVICE,
        (
            "diagnose",
            "diagnosis",
            "symptoms",
            "treatment for",
            "medicine for",
            "cure for",
            "medical advice",
            "doctor",
            "prescription",
            "disease",
            "illness",
            "sick",
            "pain",
            "medical condition",
        ),
        "I'm a portfolio assistant focused on Studio Aether's work and services. "
        "I can't provide medical advice. Please consult a healthcare professional. "
        "Would you like to know about Studio Aether's services instead?",
        advice=True,
    ),
    CategoryRule(
        Category.LEGAL_ADVICE,
        (
            "legal advice",
            "lawyer",
            "attorney",
            "sue",
            "lawsuit",
            "legal action",
            "is it legal",
            "can i sue",
            "legal rights",
            "contract",
            "legal document",
        ),
        "I'm a portfolio assistant and can't provide legal advice. Please consult "
        "a qualified attorney. I can help you learn about Studio Aether's "
        "portfolio or services though.",
        advice=True,
    ),
    CategoryRule(
        Category.FINANCIAL_ADVICE,
        (
            "investment advice",
            "should i invest",
            "stock advice",
            "financial advice",
            "tax advice",
            "how to invest",
            "financial planning",
            "retirement planning",
            "cryptocurrency investment",
            "trading advice",
        ),
        "I'm a portfolio assistant and can't provide financial or investment "
        "advice. Please consult a financial advisor. I can help you with Studio "
        "Aether's work and services instead.",
        advice=True,
    ),
    CategoryRule(
        Category.POLITICAL_ADVICE,
        (
            "who should i vote for",
            "voting advice",
            "political advice",
            "election",
            "candidate",
            "political party",
            "who to vote",
            "political opinion",
        ),
        "I'm a portfolio assistant focused on Studio Aether's portfolio and "
        "services. I can't provide political or voting advice. Would you like to "
        "know about Studio Aether's design work?",
        advice=True,
    ),
)

EVALUATION_ORDER: tuple[Category, ...] = tuple(rule.category for rule in RULES)
_BY_CATEGORY: dict[Category, CategoryRule] = {rule.category: rule for rule in RULES}


def replacement_for(category: Category | None) -> str:
    """Canned message shown in place of blocked text."""
    rule = _BY_CATEGORY.get(category) if category is not None else None
    return rule.replacement if rule is not None else FALLBACK_REPLACEMENT


def _matches(rule: CategoryRule, lowered: str) -> bool:
    return any(keyword in lowered for keyword in rule.keywords)


def _has_advice_marker(lowered: str) -> bool:
    return any(marker in lowered for marker in ADVICE_MARKERS)


def _blank(text: object) -> bool:
    return not isinstance(text, str) or not text.strip()


def _deny(rule: CategoryRule, reason: str) -> GuardrailResult:
    return GuardrailResult(
        allowed=False,
        category=rule.category,
        replacement=rule.replacement,
        reason=reason,
    )


def classify(text: str) -> Category | None:
    """First category whose keywords appear in *text*, or None."""
    if _blank(text):
        return None
    lowered = text.lower()
    for rule in RULES:
        if _matches(rule, lowered):
            return rule.category
    return None


def evaluate_outbound(text: str) -> GuardrailResult:
    """Check a user message before it is sent to the model."""
    category = classify(text)
    if category is None:
        return ALLOWED
    rule = _BY_CATEGORY[category]
    log.info("Outbound message blocked (category=%s)", category.value)
    if rule.advice:
        return _deny(rule, f"Requests {category.value}")
    return _deny(rule, f"Contains {category.value} content")


def evaluate_inbound(text: str) -> GuardrailResult:
    """Check a model response before it is displayed."""
    if _blank(text):
        return ALLOWED
    lowered = text.lower()
    directive = _has_advice_marker(lowered)
    for rule in RULES:
        if rule.advice and not directive:
            continue
        if _matches(rule, lowered):
            log.warning("Model response blocked (category=%s)", rule.category.value)
            if rule.advice:
                return _deny(rule, f"Response appears to give {rule.category.value}")
            return _deny(rule, f"Response contains {rule.category.value} content")
    return ALLOWED
