"""Error taxonomy shared by the search proxies and the notification dispatcher."""

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_REQUEST = "invalid_request"
    UPSTREAM_AUTH = "upstream_auth"
    UPSTREAM_SEARCH = "upstream_search"
    TRANSPORT = "transport"
    NOTIFICATION = "notification"

    @property
    def retryable(self) -> bool:
        """Whether the same request may succeed later without user changes."""
        return self is not ErrorKind.INVALID_REQUEST


class QuoteDeskError(Exception):
    """Base error. ``message`` is safe to show to the end user; ``detail`` is logged only."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    status_code: int = 500
    default_message = "Erreur interne du serveur. Veuillez réessayer."

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class InvalidRequestError(QuoteDeskError):
    """Caller-supplied data rejected by validation or by the provider (4xx)."""

    kind = ErrorKind.INVALID_REQUEST
    status_code = 400
    default_message = "Requête invalide."


class UpstreamAuthError(QuoteDeskError):
    """Token exchange with the provider failed."""

    kind = ErrorKind.UPSTREAM_AUTH
    status_code = 502
    default_message = "Service de recherche temporairement indisponible. Veuillez réessayer plus tard."

    def __init__(self, provider_status: int, body: str = ""):
        self.provider_status = provider_status
        super().__init__(detail=f"HTTP {provider_status}: {body}")


class UpstreamSearchError(QuoteDeskError):
    kind = ErrorKind.UPSTREAM_SEARCH
    status_code = 502
    default_message = "Erreur lors de la recherche. Veuillez réessayer plus tard."


class TransportError(QuoteDeskError):
    """Network failure or unreadable provider response."""

    kind = ErrorKind.TRANSPORT
    status_code = 502
    default_message = "Le service de recherche est injoignable. Veuillez réessayer plus tard."


class NotificationError(QuoteDeskError):
    kind = ErrorKind.NOTIFICATION
    status_code = 500
    default_message = "Erreur lors de l'envoi de la demande"
