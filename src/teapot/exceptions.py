"""Domain exceptions raised by the repository layer.

Handlers let these propagate. The pipeline's recovery stage is the single
place that turns them into JSON:API error envelopes; anything it does not
recognize becomes the generic internal_server_error.
"""


class DomainError(Exception):
    """Base class for all domain exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} with id {identifier} not found")


class InvalidIdError(DomainError):
    """Raised when an identifier is not a 24-character hex object id."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"{value!r} is not a valid object id")


class StoreError(DomainError):
    """Raised when the underlying store fails (connection, query, constraint)."""
