# chatrelay/app/users/errors.py
"""
Domain errors raised by the user store and message log.

Routes translate these into HTTP responses; the relay logs and drops them.
"""


class ChatRelayError(Exception):
    """Base class for every expected failure of a store operation."""


class InvalidFieldError(ChatRelayError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Field '{field}' is required and cannot be empty")


class UserNotFoundError(ChatRelayError):
    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class DuplicateIdentityError(ChatRelayError):
    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"User '{identity}' already exists")


class InvalidStatusError(ChatRelayError):
    def __init__(self, status):
        self.status = status
        super().__init__(f"Invalid status '{status}', expected 'online' or 'offline'")


class InvalidCredentialsError(ChatRelayError):
    def __init__(self):
        super().__init__("Incorrect username or password")


class StoreUnavailableError(ChatRelayError):
    def __init__(self, reason: str = ""):
        super().__init__(f"Database unavailable: {reason}" if reason else "Database unavailable")
