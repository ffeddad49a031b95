from .classifier import KeywordClassifier, get_classifier
from .openai_classifier import OpenAIClassifier

__all__ = ['KeywordClassifier', 'OpenAIClassifier', 'get_classifier']
