from typing import Any, Dict, Optional
import json
import logging

from openai import OpenAI, OpenAIError

from ..config.manager import ConfigManager
from ..models.enums import Category, Confidence
from ..models.schemas import Classification
from .classifier import KeywordClassifier

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert at categorizing calendar events. Be accurate and consistent."

USER_PROMPT = """Categorize this calendar event into one of these categories: work, exercise, social, rest, or other.

Event Title: {title}
Event Description: {description}

Analyze the event and respond with JSON in this format:
{{
  "category": "work|exercise|social|rest|other",
  "confidence": "high|medium|low",
  "reasoning": "brief explanation of why you chose this category"
}}

Categories:
- work: professional activities, meetings, work tasks, business events
- exercise: fitness activities, sports, gym, running, yoga, physical activities
- social: personal social events, parties, dinners with friends, social gatherings
- rest: breaks, relaxation, meditation, sleep, personal downtime
- other: everything else that doesn't fit the above categories"""


class OpenAIClassifier:
    def __init__(self, config: ConfigManager, client: Optional[OpenAI] = None):
        self.config = config
        self.model = config.get('openai.model', 'gpt-4o-mini')
        # No retries: a slow or failing call should fall back quickly
        self.client = client or OpenAI(
            api_key=config.get_openai_key(),
            timeout=config.get('openai.timeout', 10.0),
            max_retries=0,
        )
        self.fallback = KeywordClassifier()

    def classify(self, title: str, description: Optional[str] = None) -> Classification:
        """Classify with OpenAI, falling back to keywords on any failure"""
        try:
            reply = self._request(title, description)
        except (OpenAIError, ValueError) as e:
            logger.warning(f"OpenAI categorization failed, using keywords: {e}")
            return self.fallback.classify(title, description)
        except Exception as e:
            logger.error(f"Unexpected error categorizing event '{title}': {e}")
            return self.fallback.classify(title, description)

        return self._validate(reply)

    def _request(self, title: str, description: Optional[str]) -> Dict[str, Any]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT.format(
                    title=title,
                    description=description or 'No description'
                )}
            ],
            response_format={"type": "json_object"}
        )

        content = response.choices[0].message.content or '{}'
        logger.debug(f"OpenAI categorization reply: {content}")

        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            raise ValueError(f"Expected a JSON object, got: {content}")
        return parsed

    @staticmethod
    def _validate(reply: Dict[str, Any]) -> Classification:
        """Coerce the reply onto the closed enums"""
        try:
            category = Category(reply.get('category'))
        except (ValueError, TypeError):
            category = Category.OTHER

        try:
            confidence = Confidence(reply.get('confidence'))
        except (ValueError, TypeError):
            confidence = Confidence.MEDIUM

        return Classification(category=category, confidence=confidence)
