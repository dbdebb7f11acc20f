"""Domain errors raised by the service layer.

Each error carries the HTTP status the API renders it with. ``NotFoundError``
is used both for missing rows and for rows owned by another user so that the
two cases are indistinguishable to the caller.
"""


class BlocklogError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BlocklogError):
    status_code = 404


class InvalidStateError(BlocklogError):
    status_code = 403


class ConflictError(BlocklogError):
    status_code = 409


class UnauthorizedError(BlocklogError):
    status_code = 401


class ValidationFailedError(BlocklogError):
    status_code = 400


class UpstreamError(BlocklogError):
    status_code = 502
