"""Custom exceptions for the archive."""


class ArchiveError(Exception):
    """Base exception for archive operations."""
    pass


class NotFoundError(ArchiveError):
    """Operation referenced a node id that does not exist."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node with ID {node_id} not found")


class InvalidParentError(ArchiveError):
    """Requested parent cannot hold children."""
    pass


class InvalidMoveError(InvalidParentError):
    """Move would create a cycle or targets the node itself."""
    pass


class PersistenceError(ArchiveError):
    """Backend read or write failed."""
    pass


class UnsupportedFormatError(ArchiveError):
    """Import was given an unrecognized file type."""
    pass


class TranslationUnavailableError(ArchiveError):
    """Translation could not be produced."""
    pass


class InvalidFieldError(ArchiveError):
    """Update would leave a node with an invalid field value."""
    pass
