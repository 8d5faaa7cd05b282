"""Bilingual (English/Hebrew) content archive."""
from .exceptions import (
    ArchiveError,
    InvalidFieldError,
    InvalidMoveError,
    InvalidParentError,
    NotFoundError,
    PersistenceError,
    TranslationUnavailableError,
    UnsupportedFormatError,
)

__version__ = "0.1.0"

__all__ = [
    "ArchiveError",
    "InvalidFieldError",
    "InvalidMoveError",
    "InvalidParentError",
    "NotFoundError",
    "PersistenceError",
    "TranslationUnavailableError",
    "UnsupportedFormatError",
]
