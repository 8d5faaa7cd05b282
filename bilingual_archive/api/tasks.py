"""Background work scheduled by route handlers."""
import logging

from ..exceptions import ArchiveError
from ..importer.service import ImportService

logger = logging.getLogger(__name__)


async def translate_in_background(import_service: ImportService, node_id: str) -> None:
    """Fill in a node's translation after the response has been sent.

    The node may have been edited or deleted in the meantime; such failures
    are logged and the task ends.
    """
    try:
        await import_service.complete_translation(node_id)
    except ArchiveError as e:
        logger.warning(f"Background translation for node {node_id} abandoned: {e}")
