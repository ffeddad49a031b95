"""Closed enumerations for event categorization."""
from enum import Enum
from typing import Dict, Optional


class Category(str, Enum):
    WORK = "work"
    EXERCISE = "exercise"
    SOCIAL = "social"
    REST = "rest"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Category":
        """Resolve a stored value, treating missing or unknown labels as OTHER"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


CATEGORY_COLORS: Dict[Category, str] = {
    Category.WORK: "#3b82f6",
    Category.EXERCISE: "#10b981",
    Category.SOCIAL: "#8b5cf6",
    Category.REST: "#06b6d4",
    Category.OTHER: "#f59e0b",
}
