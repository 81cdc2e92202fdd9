"""Domain errors raised by the playlist services and mapped to HTTP responses by the API."""

from __future__ import annotations


class PlaylistServiceError(Exception):
    """Base exception for all service-level errors."""

    status_code = 400

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NotFoundError(PlaylistServiceError):
    """Raised when a playlist, track, or membership does not exist."""

    status_code = 404

    def __init__(self, entity_type: str, identifier: object, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class AlreadyExistsError(PlaylistServiceError):
    """Raised when a track is already a member of the playlist."""

    status_code = 409

    def __init__(self, message: str) -> None:
        super().__init__(message, code="ALREADY_EXISTS")


class ForbiddenError(PlaylistServiceError):
    """Raised when a caller other than the creator tries to mutate or read a private playlist."""

    status_code = 403

    def __init__(self, message: str) -> None:
        super().__init__(message, code="FORBIDDEN")


class ConflictError(PlaylistServiceError):
    """Raised when an explicit position cannot be honoured."""

    status_code = 409

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFLICT")
