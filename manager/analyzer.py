"""Heuristic prompt analysis: entities, features, database and context."""

import logging

from config.rules import DATABASE_HINTS, DEFAULT_FEATURE, FEATURE_KEYWORDS
from core.state import GenerationRequest, PromptAnalysis
from utils.naming import detect_entity, find_entities, has_keyword

logger = logging.getLogger(__name__)


def detect_features(text):
    features = []
    for keywords, label in FEATURE_KEYWORDS:
        if any(has_keyword(text, kw, plural=True) for kw in keywords):
            features.append(label)
    return features or [DEFAULT_FEATURE]


def detect_database(text):
    for keyword, kind in DATABASE_HINTS:
        if has_keyword(text, keyword):
            return kind
    return None


def analyze_prompt(request: GenerationRequest) -> PromptAnalysis:
    """Build a PromptAnalysis from the request text and its context.

    The main entity is always first in ``entities``; other catalogue nouns
    found in the text follow in table order.
    """
    text = request.prompt
    main = detect_entity(text)
    entities = [main] + [e for e in find_entities(text) if e != main]
    context = request.context or {}

    analysis = PromptAnalysis(
        original_prompt=text,
        entities=tuple(entities),
        features=tuple(detect_features(text)),
        database=detect_database(text),
        domain=context.get("domain") or "general",
        complexity=context.get("complexity") or "standard",
        framework=request.framework or "react",
        style=context.get("style"),
    )
    logger.debug("Analysis: entity=%s features=%s db=%s",
                 main, list(analysis.features), analysis.database)
    return analysis
