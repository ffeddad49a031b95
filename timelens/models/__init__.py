from timelens.models.base import Base
from timelens.models.enums import Category, Confidence, CATEGORY_COLORS
from timelens.models.schemas import Classification

__all__ = ['Base', 'Category', 'Confidence', 'CATEGORY_COLORS', 'Classification']
