"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing
    # str(exception). Don't raise this directly - use a specific subclass so callers can catch
    # precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    # Yo, this is for "get by ID" operations that fail. Use it when a missing entity is truly
    # exceptional (update of an id that must exist). Lookups that often miss return None instead.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationFailure:
    """One failed rule: which property and why."""

    def __init__(self, property_name: str, message: str, attempted_value: Any = None) -> None:
        self.property_name = property_name
        self.message = message
        self.attempted_value = attempted_value

    def __repr__(self) -> str:
        return f"ValidationFailure({self.property_name!r}, {self.message!r})"

    def __str__(self) -> str:
        return f"{self.property_name}: {self.message}"


class ValidationException(DomainException):
    """Raised when entity validation fails.

    Carries every failed rule in ``failures`` so the add-artist flow can log
    all of them at once instead of only the first.
    """

    def __init__(
        self, message: str | None = None, failures: list[ValidationFailure] | None = None
    ) -> None:
        self.failures = list(failures or [])
        if message is None:
            message = "Validation failed: " + "; ".join(str(f) for f in self.failures)
        super().__init__(message)


class DuplicateEntityException(DomainException):
    """Raised when trying to create a duplicate entity."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ArtistNotFoundError(DomainException):
    """Metadata provider has no artist with this foreign id."""

    def __init__(self, foreign_artist_id: str) -> None:
        super().__init__(f"Artist {foreign_artist_id} was not found, it may have been removed")
        self.foreign_artist_id = foreign_artist_id


class ConfigurationError(DomainException):
    """Required configuration is missing or invalid.

    Example:
        raise ConfigurationError("No root folders configured")
    """

    pass


class ExternalServiceError(DomainException):
    """A collaborator outside the process failed (metadata provider, database).

    Example:
        raise ExternalServiceError("Metadata provider timed out", service_name="metadata")
    """

    def __init__(self, message: str, service_name: str | None = None) -> None:
        super().__init__(message)
        self.service_name = service_name


__all__ = [
    "ArtistNotFoundError",
    "ConfigurationError",
    "DomainException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "ExternalServiceError",
    "ValidationException",
    "ValidationFailure",
]
