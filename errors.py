from typing import Any, Dict, Optional


class RelayError(Exception):
    """Terminal failure for a single request, rendered as a JSON error body."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, error: Optional[str] = None):
        self.error = error or self.error
        super().__init__(self.error)

    def to_content(self) -> Dict[str, Any]:
        return {"error": self.error}


class ValidationError(RelayError):
    status_code = 400
    error = "Invalid request body"


class MethodNotAllowed(RelayError):
    status_code = 405
    error = "Method not allowed"


class ServerConfigurationError(RelayError):
    status_code = 500
    error = "Server configuration error"


class ProviderError(RelayError):
    """Non-success answer from the Graph API; mirrors its status code."""

    error = "Failed to send event to Meta"

    def __init__(self, status_code: int, details: Any):
        super().__init__()
        self.status_code = status_code
        self.details = details

    def to_content(self) -> Dict[str, Any]:
        return {"error": self.error, "details": self.details}
