"""Import flow: document -> placeholder file node -> translation."""
from typing import Callable, Optional
import logging

from .converter import DocumentImporter, title_from_filename
from ..exceptions import InvalidParentError
from ..models.labels import join_label
from ..models.node import ContentType, FileDraft, FileNode, TranslationStatus
from ..storage.node_store import NodeStore
from ..translation.service import PENDING_PLACEHOLDER, TranslationService, is_placeholder

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class ImportService:
    """Creates file nodes from uploaded documents and fills in translations."""

    def __init__(
        self,
        store: NodeStore,
        translator: TranslationService,
        importer: Optional[DocumentImporter] = None
    ):
        self.store = store
        self.translator = translator
        self.importer = importer or DocumentImporter()

    async def import_document(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        parent_id: Optional[str] = None,
        title_he: Optional[str] = None,
        progress: Optional[ProgressCallback] = None
    ) -> FileNode:
        """Convert a document and store it as a Hebrew-source text node.

        The node is created with placeholder English content and a
        ``pending`` translation status; call :meth:`complete_translation`
        afterwards to fill it in.

        Args:
            data: Raw file bytes
            filename: Uploaded file name
            content_type: Declared MIME type
            parent_id: Destination folder
            title_he: Hebrew half of the node label
            progress: Optional status callback

        Returns:
            FileNode: The created node

        Raises:
            UnsupportedFormatError: If the document cannot be converted
            PersistenceError: If the node cannot be stored
        """
        _report(progress, f"Extracting text from {filename}...")
        content_html = self.importer.convert(data, filename, content_type)

        _report(progress, "Saving document...")
        draft = FileDraft(
            name=join_label(title_from_filename(filename), title_he),
            parent_id=parent_id,
            content_type=ContentType.TEXT,
            content_he=content_html,
            content_en=PENDING_PLACEHOLDER["en"],
            translation_status=TranslationStatus.PENDING,
        )
        node = await self.store.add(draft)
        logger.info(f"Imported {filename} as node {node.id}")
        return node

    async def complete_translation(
        self,
        node_id: str,
        progress: Optional[ProgressCallback] = None
    ) -> FileNode:
        """Fill in the missing language of a file node in place.

        Translation failures are written to the node as a ``failed`` status
        with placeholder content rather than raised.

        Raises:
            NotFoundError: If the node no longer exists
            InvalidParentError: If the node is a folder
            PersistenceError: If the update cannot be stored
        """
        node = await self.store.get(node_id)
        if not isinstance(node, FileNode):
            raise InvalidParentError(f"Node {node_id} is a folder and has no content")

        # Hebrew is the source unless only English carries real content.
        if is_placeholder(node.content_he) and not is_placeholder(node.content_en):
            source, target, field = node.content_en, "he", "content_he"
        else:
            source = "" if is_placeholder(node.content_he) else node.content_he
            target, field = "en", "content_en"

        _report(progress, f"Generating {'English' if target == 'en' else 'Hebrew'} translation...")
        result = await self.translator.translate(source, target_language=target)
        updated = await self.store.update(
            node_id,
            {field: result.html, "translation_status": result.status},
        )
        if result.ok:
            logger.info(f"Translation for node {node_id} finished")
        else:
            logger.warning(f"Translation for node {node_id} failed; placeholder stored")
        return updated


def _report(progress: Optional[ProgressCallback], message: str) -> None:
    if progress is not None:
        progress(message)
