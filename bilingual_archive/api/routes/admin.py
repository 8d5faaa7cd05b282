"""API routes for the admin console."""
from typing import Literal
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..auth import passcode_matches, require_admin
from ..dependencies import get_store
from ..models import ErrorResponse, SchemaResponse, SyncResponse, UnlockRequest, UnlockResponse
from ...storage.node_store import NodeStore
from ...storage.sql_store import schema_sql

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    },
)


@router.post(
    "/unlock",
    response_model=UnlockResponse,
    summary="Unlock admin console",
    description="Check the shared admin passcode",
)
async def unlock(body: UnlockRequest, request: Request) -> UnlockResponse:
    """Check the shared admin passcode."""
    if not passcode_matches(body.passcode, request.app.state.settings.admin_passcode):
        logger.warning("Admin unlock attempt with wrong passcode")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin passcode",
        )
    return UnlockResponse(unlocked=True)


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Sync to remote",
    description="Upsert every locally cached node into the remote database",
    dependencies=[Depends(require_admin)],
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse}},
)
async def sync_to_remote(store: NodeStore = Depends(get_store)) -> SyncResponse:
    """Upsert the local snapshot into the remote database."""
    synced = await store.sync_to_remote()
    return SyncResponse(synced=synced)


@router.get(
    "/schema",
    response_model=SchemaResponse,
    summary="Remote schema",
    description="Get the CREATE TABLE statement for the remote nodes table",
    dependencies=[Depends(require_admin)],
)
async def get_schema(
    dialect: Literal["postgresql", "sqlite"] = Query("postgresql", description="SQL dialect"),
) -> SchemaResponse:
    """Get the DDL for the nodes table."""
    return SchemaResponse(dialect=dialect, sql=schema_sql(dialect))
