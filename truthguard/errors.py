"""
Exceptions raised along the analysis path.

The endpoint turns every one of these into a JSON error body in a single
place (see `main.py`); the client turns them into notifications.
"""

from typing import Optional


class TruthGuardError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigurationError(TruthGuardError):
    pass


class GatewayError(TruthGuardError):
    """The chat-completion gateway answered with a non-success status."""

    status_code = 500

    def __init__(self, status: int, body: str = "", message: Optional[str] = None):
        self.status = status
        self.body = body
        super().__init__(message or f"AI Gateway error: {status} {body}".strip())


class RateLimitError(GatewayError):
    status_code = 429

    def __init__(self, body: str = ""):
        super().__init__(429, body, "Rate limit exceeded. Please try again later.")


class CreditsExhaustedError(GatewayError):
    status_code = 402

    def __init__(self, body: str = ""):
        super().__init__(402, body, "AI credits exhausted. Please add credits to continue.")


class StorageError(TruthGuardError):
    """Upload to the object store failed."""


class InputRejected(TruthGuardError):
    """User input refused before anything was sent over the network."""

    def __init__(self, title: str, description: str):
        self.title = title
        self.description = description
        super().__init__(description)


class AnalysisFailed(TruthGuardError):
    """The analysis endpoint replied with an error."""
