import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from timelens.config.manager import ConfigManager
from timelens.models.enums import Category, Confidence
from timelens.nlp.classifier import KeywordClassifier, get_classifier
from timelens.nlp.openai_classifier import OpenAIClassifier


def fake_openai(content=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create.side_effect = error
    else:
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )
    return client


@pytest.mark.parametrize("title,description,expected", [
    ("Weekly standup", None, Category.WORK),
    ("Client presentation", "quarterly numbers", Category.WORK),
    ("Morning yoga", None, Category.EXERCISE),
    ("Tennis with Sam", None, Category.EXERCISE),
    ("Birthday party", None, Category.SOCIAL),
    ("Coffee", "catch up with friends", Category.SOCIAL),
    ("Doctor", None, Category.REST),
    ("Nap", "sleep it off", Category.REST),
])
def test_keyword_matches(title, description, expected):
    result = KeywordClassifier().classify(title, description)
    assert result.category == expected
    assert result.confidence == Confidence.MEDIUM


def test_keyword_no_match_is_other_low():
    result = KeywordClassifier().classify("Pick up groceries", None)
    assert result.category == Category.OTHER
    assert result.confidence == Confidence.LOW


def test_work_wins_over_social():
    result = KeywordClassifier().classify("Team lunch meeting")
    assert result.category == Category.WORK


def test_exercise_wins_over_rest():
    result = KeywordClassifier().classify("Gym", "then relax")
    assert result.category == Category.EXERCISE


def test_keyword_is_case_insensitive_and_reads_description():
    result = KeywordClassifier().classify("Thursday", "YOGA at the park")
    assert result.category == Category.EXERCISE


def test_keyword_is_deterministic():
    classifier = KeywordClassifier()
    first = classifier.classify("Project review", "with the client")
    assert all(classifier.classify("Project review", "with the client") == first for _ in range(5))


def test_openai_reply_is_used(config):
    client = fake_openai(json.dumps({"category": "social", "confidence": "high", "reasoning": "dinner"}))
    result = OpenAIClassifier(config, client=client).classify("Dinner at Luca's")

    assert result.category == Category.SOCIAL
    assert result.confidence == Confidence.HIGH

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert "Dinner at Luca's" in kwargs["messages"][1]["content"]
    assert "No description" in kwargs["messages"][1]["content"]


def test_openai_invalid_values_get_defaults(config):
    client = fake_openai(json.dumps({"category": "chores", "confidence": "very"}))
    result = OpenAIClassifier(config, client=client).classify("Laundry")

    assert result.category == Category.OTHER
    assert result.confidence == Confidence.MEDIUM


def test_openai_missing_values_get_defaults(config):
    client = fake_openai("{}")
    result = OpenAIClassifier(config, client=client).classify("Laundry")

    assert result.category == Category.OTHER
    assert result.confidence == Confidence.MEDIUM


@pytest.mark.parametrize("client", [
    fake_openai(error=RuntimeError("connection reset")),
    fake_openai(error=TimeoutError("timed out")),
    fake_openai("this is not json"),
    fake_openai('["work", "high"]'),
])
def test_openai_failures_fall_back_to_keywords(config, client):
    classifier = OpenAIClassifier(config, client=client)
    keywords = KeywordClassifier()

    for title, description in [("Team lunch meeting", None), ("Gym", "legs"), ("Groceries", None)]:
        assert classifier.classify(title, description) == keywords.classify(title, description)


def test_get_classifier_without_key_uses_keywords(config):
    assert isinstance(get_classifier(config), KeywordClassifier)
    assert isinstance(get_classifier(None), KeywordClassifier)


def test_get_classifier_with_key_uses_openai(monkeypatch, tmp_path):
    monkeypatch.setenv('OPENAI_API_KEY', 'sk-test')
    config = ConfigManager(env_file=str(tmp_path / '.env'))

    classifier = get_classifier(config)

    assert isinstance(classifier, OpenAIClassifier)
    assert classifier.model == config.get('openai.model')
