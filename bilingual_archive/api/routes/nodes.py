"""API routes for archive nodes."""
from typing import List, Literal, Optional
import logging

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Path, Query, status

from ..auth import require_admin
from ..dependencies import get_import_service, get_store
from ..models import DeleteResponse, ErrorResponse, MoveRequest, NodeList, NodeUpdateRequest
from ..tasks import translate_in_background
from ...exceptions import InvalidParentError
from ...importer.service import ImportService
from ...models.node import ContentType, FileNode, Node, NodeDraft, TranslationStatus
from ...storage.node_store import NodeStore

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(
    tags=["nodes"],
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
)

ADMIN_RESPONSES = {
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


@router.get(
    "/nodes",
    response_model=NodeList,
    summary="List nodes",
    description="Get nodes, optionally limited to one folder, a type, or a name search",
)
async def list_nodes(
    parent_id: Optional[str] = Query(None, description="Only direct children of this folder"),
    root: bool = Query(False, description="Only root-level nodes"),
    q: Optional[str] = Query(None, description="Case-insensitive name search"),
    limit: int = Query(5, ge=1, le=100, description="Maximum search results"),
    node_type: Optional[Literal["folder", "file"]] = Query(None, alias="type", description="Filter by node type"),
    content_type: Optional[ContentType] = Query(None, description="Filter files by content type"),
    store: NodeStore = Depends(get_store),
) -> NodeList:
    """Get nodes with optional filtering."""
    if q:
        nodes = await store.search(q, limit=limit)
    elif root or parent_id is not None:
        nodes = await store.children(None if root else parent_id)
    else:
        nodes = await store.fetch_all()

    if node_type is not None:
        nodes = [n for n in nodes if n.type == node_type]
    if content_type is not None:
        nodes = [n for n in nodes if isinstance(n, FileNode) and n.content_type == content_type]

    return NodeList(items=nodes, total=len(nodes))


@router.get(
    "/videos/featured",
    response_model=List[FileNode],
    summary="Featured videos",
    description="Get the newest video files",
)
async def featured_videos(
    limit: int = Query(4, ge=1, le=20),
    store: NodeStore = Depends(get_store),
) -> List[FileNode]:
    """Get the newest video files."""
    return await store.featured_videos(limit=limit)


@router.get(
    "/nodes/{node_id}",
    response_model=Node,
    summary="Get node",
    description="Get a node by ID",
)
async def get_node(
    node_id: str = Path(..., description="Node ID"),
    store: NodeStore = Depends(get_store),
) -> Node:
    """Get a node by ID."""
    return await store.get(node_id)


@router.get(
    "/nodes/{node_id}/children",
    response_model=NodeList,
    summary="List children",
    description="Get the direct children of a folder, newest first",
)
async def list_children(
    node_id: str = Path(..., description="Folder ID"),
    store: NodeStore = Depends(get_store),
) -> NodeList:
    """Get the direct children of a folder."""
    await store.get(node_id)
    children = await store.children(node_id)
    return NodeList(items=children, total=len(children))


@router.get(
    "/nodes/{node_id}/breadcrumbs",
    response_model=List[Node],
    summary="Get breadcrumbs",
    description="Get the path from the root down to a node",
)
async def breadcrumbs(
    node_id: str = Path(..., description="Node ID"),
    store: NodeStore = Depends(get_store),
) -> List[Node]:
    """Get the path from the root down to a node."""
    return await store.breadcrumbs(node_id)


@router.post(
    "/nodes",
    response_model=Node,
    status_code=status.HTTP_201_CREATED,
    summary="Create node",
    description="Create a folder or a file",
    dependencies=[Depends(require_admin)],
    responses=ADMIN_RESPONSES,
)
async def create_node(
    draft: NodeDraft = Body(..., description="Folder or file fields"),
    store: NodeStore = Depends(get_store),
) -> Node:
    """Create a folder or a file."""
    return await store.add(draft)


@router.patch(
    "/nodes/{node_id}",
    response_model=Node,
    summary="Update node",
    description="Change a node's name or content; fields that do not apply are ignored",
    dependencies=[Depends(require_admin)],
    responses=ADMIN_RESPONSES,
)
async def update_node(
    node_id: str = Path(..., description="Node ID"),
    update: NodeUpdateRequest = Body(...),
    store: NodeStore = Depends(get_store),
) -> Node:
    """Change a node's name or content."""
    return await store.update(node_id, update.model_dump(exclude_unset=True))


@router.delete(
    "/nodes/{node_id}",
    response_model=DeleteResponse,
    summary="Delete node",
    description="Delete a node together with everything beneath it",
    dependencies=[Depends(require_admin)],
    responses=ADMIN_RESPONSES,
)
async def delete_node(
    node_id: str = Path(..., description="Node ID"),
    store: NodeStore = Depends(get_store),
) -> DeleteResponse:
    """Delete a node and its subtree."""
    deleted = await store.delete(node_id)
    return DeleteResponse(deleted=deleted)


@router.post(
    "/nodes/{node_id}/move",
    response_model=Node,
    summary="Move node",
    description="Move a node into another folder or to the root level",
    dependencies=[Depends(require_admin)],
    responses=ADMIN_RESPONSES,
)
async def move_node(
    node_id: str = Path(..., description="Node ID"),
    move: MoveRequest = Body(...),
    store: NodeStore = Depends(get_store),
) -> Node:
    """Move a node."""
    return await store.move(node_id, move.parent_id)


@router.post(
    "/nodes/{node_id}/translate",
    response_model=Node,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Translate node",
    description="Re-run machine translation for a file in the background",
    dependencies=[Depends(require_admin)],
    responses=ADMIN_RESPONSES,
)
async def translate_node(
    background_tasks: BackgroundTasks,
    node_id: str = Path(..., description="File node ID"),
    store: NodeStore = Depends(get_store),
    import_service: ImportService = Depends(get_import_service),
) -> Node:
    """Mark a file as pending translation and translate it in the background."""
    node = await store.get(node_id)
    if not isinstance(node, FileNode):
        raise InvalidParentError(f"Node {node_id} is a folder and has no content to translate")
    node = await store.update(node_id, {"translation_status": TranslationStatus.PENDING})
    background_tasks.add_task(translate_in_background, import_service, node_id)
    return node
