"""
Shared exceptions for AI service modules.
"""


class AIServiceError(Exception):
    """Raised when AI service operations fail."""

    pass


class AIResponseFormatError(AIServiceError):
    """Raised when the model answered but the answer is not usable JSON."""

    pass
