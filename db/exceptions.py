"""Errors raised by the data layer."""


class DataError(Exception):
    """A Supabase read or write failed. ``message`` is shown to the user as-is."""

    def __init__(self, message: str, operation: str = ""):
        super().__init__(message)
        self.message = message
        self.operation = operation


class NotFoundError(DataError):
    pass


class ProfileCreationError(DataError):
    """The auth account was created but the matching profile row was not."""

    def __init__(self, message: str, user_id: str = ""):
        super().__init__(message, operation="create_profile")
        self.user_id = user_id


class AuthorizationError(DataError):
    pass


def error_message(exc: BaseException) -> str:
    """Best human-readable text for a provider exception."""
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    details = getattr(exc, "details", None)
    if details:
        return str(details)
    return str(exc) or exc.__class__.__name__
