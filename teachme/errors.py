"""
Exception taxonomy for TeachMe.

Gateway failures are caught at the session boundary and turned into fallback
content or a pessimistic grading outcome. The rest are raised to the caller.
"""


class TeachMeError(Exception):
    """Base class for all TeachMe errors."""
    pass


class CurriculumError(TeachMeError):
    """Raised when catalog data is invalid or a selection id is unknown."""
    pass


class GatewayError(TeachMeError):
    """Raised when a language-model round trip fails."""
    pass


class GatewayUnavailable(GatewayError):
    """Raised when the model cannot be reached at all (no credentials or SDK)."""
    pass


class MalformedGradingPayload(TeachMeError):
    """Raised when a quiz answer from the model does not have the expected shape."""
    pass


class EmptyUserInput(TeachMeError, ValueError):
    """Raised when an explanation is blank."""
    pass


class SessionBusy(TeachMeError):
    """Raised when an intent arrives while a model call is outstanding."""
    pass


class InvalidTransition(TeachMeError):
    """Raised when an intent is not allowed in the current session phase."""
    pass
