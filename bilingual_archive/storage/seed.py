"""Starter folders written into an empty archive."""
from typing import List

from ..models.node import FolderNode

# Top-level sections, newest first when sorted by creation time.
DEFAULT_SECTIONS = [
    ("f-concepts", "Messianic Concepts | מושגים וערכים"),
    ("f-belief", "Belief & Anticipation | אמונה וציפייה"),
    ("f-destinies", "Redemptive Prophecies | יעודי הגאולה"),
    ("f-sages", 'Teachings of the Sages | ילקוט ביאורי חז"ל'),
    ("f-notes", "Scholarly Insights | הערות וביאורים"),
    ("f-rambam", 'Maimonides Studies | ביאורי הרמב"ם'),
    ("f-seforim", "The Classic Library | אוצר הספרים"),
    ("f-videos", "Multimedia Archive | תיעוד ומדיה"),
]


def default_seed(now_ms: int) -> List[FolderNode]:
    """Build the default top-level folders stamped relative to ``now_ms``."""
    return [
        FolderNode(id=node_id, name=name, parent_id=None, created_at=now_ms - 10 * i)
        for i, (node_id, name) in enumerate(DEFAULT_SECTIONS)
    ]
