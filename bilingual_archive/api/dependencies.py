"""Dependencies that hand route handlers the app's services."""
from fastapi import Request

from ..importer.service import ImportService
from ..storage.node_store import NodeStore


async def get_store(request: Request) -> NodeStore:
    """Get the NodeStore from app state."""
    return request.app.state.store


async def get_import_service(request: Request) -> ImportService:
    """Get the ImportService from app state."""
    return request.app.state.import_service
