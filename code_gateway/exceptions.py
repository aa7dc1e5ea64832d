class GatewayError(Exception):
    """Base exception for all Code Gateway errors.

    Every subclass carries the HTTP status and the client-facing detail it
    maps to at the API boundary.
    """

    status_code: int = 500
    detail: str = "Internal Error"

    def __init__(self, detail: str = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class UnauthorizedError(GatewayError):
    """Raised when no caller identity could be resolved."""

    status_code = 401
    detail = "Unauthorized"


class UnconfiguredError(GatewayError):
    """Raised when the upstream API credential is missing."""

    status_code = 500
    detail = "OpenAI API Key not configured."


class BadRequestError(GatewayError):
    """Raised when a required request field is missing or empty."""

    status_code = 400
    detail = "Bad Request"


class QuotaExceededError(GatewayError):
    """Base exception for callers with no free trial left and no subscription."""

    status_code = 403
    detail = "Quota exceeded"


class FreeTrialExpiredError(QuotaExceededError):
    """Raised on the completion path when the quota gate fails."""

    status_code = 403
    detail = "Free trial has expired. Please upgrade to pro."


class CloudStorageUnavailableError(QuotaExceededError):
    """Raised on the history paths when the quota gate fails."""

    status_code = 404
    detail = "No cloud storage for free trial. Please upgrade to pro."


class InternalError(GatewayError):
    """Raised when an upstream or store call fails unexpectedly."""

    status_code = 500
    detail = "Internal Error"


class ProviderError(Exception):
    """Raised when the upstream completion API fails.

    Not a GatewayError: the service reports it to callers as InternalError.
    """

    def __init__(self, message: str, provider_name: str = None):
        super().__init__(message)
        self.provider_name = provider_name
