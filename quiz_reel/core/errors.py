"""Exceptions raised by the QuizReel core."""


class QuizReelError(Exception):
    """Base class for all domain errors."""


class ValidationError(QuizReelError, ValueError):
    """Raised when input is rejected before any state is touched."""


class DuplicateRatingError(ValidationError):
    """Raised when the one-rating-per-user policy sees a second rating."""


class NotFoundError(QuizReelError, LookupError):
    """Raised when a quiz cannot be resolved."""


class TransportError(QuizReelError):
    """Raised when a persistence collaborator cannot be reached."""
