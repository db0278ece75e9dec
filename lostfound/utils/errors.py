class AppError(Exception):
    """Base for errors that map to a JSON ``{"message": ...}`` response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(AppError):
    status_code = 400


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class NotFoundOrUnauthorized(NotFound):
    # Same status as NotFound so callers cannot probe for other users' rows
    pass


class Conflict(AppError):
    status_code = 409
