"""
Error kinds raised by the officiating core.

Every error carries a stable ``code`` (a key of ``ERROR_MESSAGES``) so the
HTTP layer and presentation code can map it without parsing messages.
"""

from matchdesk.utils.error_messages import get_error_message


class MatchDeskError(Exception):
    """Base class for officiating errors."""

    status_code = 400
    default_code = "error"

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        self.code = code or self.default_code
        self._explicit_message = message
        super().__init__(message or get_error_message(self.code))

    @property
    def message(self) -> str:
        return str(self)

    def localized(self, lang: str = "en") -> str:
        """Message in ``lang``; an explicit message is returned as given."""
        return self._explicit_message or get_error_message(self.code, lang)


class MatchLocked(MatchDeskError):
    """Mutation attempted on a finished match."""

    status_code = 409
    default_code = "match_locked"

    def __init__(self, match_id: int | None = None, message: str | None = None) -> None:
        self.match_id = match_id
        super().__init__(message)


class ValidationError(MatchDeskError):
    """Input rejected before any request is sent."""

    status_code = 422
    default_code = "validation_error"


class NotFound(MatchDeskError):
    """Referenced match, event or team does not exist."""

    status_code = 404
    default_code = "not_found"


class TransportError(MatchDeskError):
    """The persistence collaborator call failed.

    The original exception is kept as ``__cause__``.
    """

    status_code = 502
    default_code = "transport_error"
