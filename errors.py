"""Errors raised by the store, repository and session gate.

Each one carries the HTTP status the handlers answer with.
"""


class BlogError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BlogError):
    status_code = 400


class Unauthorized(BlogError):
    status_code = 401


class NotFound(BlogError):
    status_code = 404


class StoreError(BlogError):
    status_code = 500
