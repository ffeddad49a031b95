"""TimeLens - personal time analytics for your calendars"""

__version__ = "0.1.0"
