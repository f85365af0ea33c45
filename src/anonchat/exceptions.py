"""AnonChat exception classes."""


class AnonChatException(Exception):
    """Base exception for all AnonChat errors."""
    pass


class RoomCreationError(AnonChatException):
    """Raised when the backend refuses or fails to create a room."""
    pass
