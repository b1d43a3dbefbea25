"""
Error taxonomy for the gateway.

GatewayError subclasses map directly onto an HTTP response body of the form
{"error": <label>, "message": <text>}. StoreUnavailable never reaches the
request boundary: callers of the record store either substitute synthetic
data or degrade to an empty result.
"""


class GatewayError(Exception):
    """Base class for errors surfaced to the client."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class NotFoundError(GatewayError):
    status_code = 404
    error = "Not Found"


class BadRequestError(GatewayError):
    status_code = 400
    error = "Bad Request"


class UnauthorizedError(GatewayError):
    status_code = 401
    error = "Unauthorized"


class StoreUnavailable(Exception):
    """Raised by the record store when the backing database cannot be reached or errors out."""

    def __init__(self, operation: str, cause: Exception = None):
        self.operation = operation
        self.cause = cause
        detail = f"{operation}: {cause}" if cause is not None else operation
        super().__init__(f"Record store unavailable during {detail}")
