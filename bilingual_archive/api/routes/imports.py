"""API routes for document imports."""
from typing import Optional
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile, status

from ..auth import require_admin
from ..dependencies import get_import_service
from ..models import ErrorResponse
from ..tasks import translate_in_background
from ...importer.service import ImportService
from ...models.node import FileNode

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(
    prefix="/imports",
    tags=["imports"],
    dependencies=[Depends(require_admin)],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
)


@router.post(
    "",
    response_model=FileNode,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Import document",
    description=(
        "Upload a DOCX or text document. The file node is created immediately "
        "with placeholder English content and translated in the background."
    ),
)
async def import_document(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(..., description="DOCX, TXT or MD document"),
    parent_id: Optional[str] = Form(None, description="Destination folder ID"),
    title_he: Optional[str] = Form(None, description="Hebrew half of the node label"),
    import_service: ImportService = Depends(get_import_service),
) -> FileNode:
    """Import a document and schedule its translation."""
    data = await file.read()
    filename = file.filename or "untitled.txt"
    node = await import_service.import_document(
        data,
        filename,
        content_type=file.content_type,
        parent_id=parent_id or None,
        title_he=title_he,
        progress=lambda message: logger.info(f"[{filename}] {message}"),
    )
    background_tasks.add_task(translate_in_background, import_service, node.id)
    return node
