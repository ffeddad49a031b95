from typing import List, Optional, Pattern, Tuple
import re
import logging

from ..models.enums import Category, Confidence
from ..models.schemas import Classification

logger = logging.getLogger(__name__)

# Tested in this order; the first hit wins, so "team lunch meeting" is work.
# Plain substring patterns: "run" also matches "brunch".
KEYWORD_PATTERNS: List[Tuple[Category, Pattern]] = [
    (Category.WORK, re.compile(
        r"(meeting|standup|call|work|office|client|project|review|interview|conference|presentation)"
    )),
    (Category.EXERCISE, re.compile(
        r"(gym|workout|exercise|run|yoga|fitness|sport|training|cycling|swimming"
        r"|basketball|football|soccer|tennis|baseball|volleyball|hockey)"
    )),
    (Category.SOCIAL, re.compile(
        r"(dinner|lunch|coffee|party|social|friends|family|birthday|wedding|date)"
    )),
    (Category.REST, re.compile(
        r"(break|rest|sleep|relax|vacation|holiday|personal|medical|doctor|appointment)"
    )),
]


class KeywordClassifier:
    """Deterministic keyword matching, always available"""

    def classify(self, title: str, description: Optional[str] = None) -> Classification:
        text = f"{title or ''} {description or ''}".lower()

        for category, pattern in KEYWORD_PATTERNS:
            if pattern.search(text):
                return Classification(category=category, confidence=Confidence.MEDIUM)

        return Classification(category=Category.OTHER, confidence=Confidence.LOW)


def get_classifier(config=None):
    """Pick the OpenAI classifier when an API key is configured, keywords otherwise"""
    if config is not None and config.get_openai_key():
        from .openai_classifier import OpenAIClassifier
        logger.info("Using OpenAI event classifier")
        return OpenAIClassifier(config)

    logger.info("OpenAI API key not configured, using keyword classifier")
    return KeywordClassifier()
