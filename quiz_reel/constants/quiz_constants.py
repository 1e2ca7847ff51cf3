"""Quiz-related constants shared by the core and the API layer."""

MIN_RATING: int = 1
MAX_RATING: int = 5
DEFAULT_AVERAGE_RATING: float = 0.0
MIN_OPTIONS_PER_QUESTION: int = 2
