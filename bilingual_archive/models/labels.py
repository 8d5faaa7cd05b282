"""Dual-language display labels ("English | Hebrew")."""
from typing import Optional, Tuple

SEPARATOR = "|"


def split_label(name: str) -> Tuple[str, Optional[str]]:
    """Split a label into its English and Hebrew halves.

    Only the first separator counts; the Hebrew half is None when the label
    carries a single language.
    """
    if SEPARATOR not in name:
        return name.strip(), None
    english, hebrew = name.split(SEPARATOR, 1)
    return english.strip(), (hebrew.strip() or None)


def join_label(english: str, hebrew: Optional[str] = None) -> str:
    """Build a label from its two halves."""
    english = english.strip()
    if not hebrew or not hebrew.strip():
        return english
    return f"{english} {SEPARATOR} {hebrew.strip()}"


def display_name(name: str) -> str:
    """English half of a label."""
    return split_label(name)[0]
