"""
Workspace Endpoints - listing, opening and editing catalog entries.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from wsrecall.shared.errors import LaunchError, WorkspaceNotFoundError
from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.location import LocationKind
from wsrecall.shared.models.workspace import WorkspaceFilter, WorkspaceType, WorkspaceView
from wsrecall.pipeline.context import AppContext
from wsrecall.web.dependencies import get_context

logger = get_logger(__name__)
router = APIRouter(tags=["workspaces"])


class OpenRequest(BaseModel):
    new_window: bool = False
    dry_run: bool = False


class WorkspaceUpdate(BaseModel):
    is_favorite: Optional[bool] = None
    is_pinned: Optional[bool] = None
    tags: Optional[List[str]] = None
    description: Optional[str] = None


def _not_found(workspace_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Workspace not found: {workspace_id}")


@router.get("/api/workspaces")
async def list_workspaces(
    search: Optional[str] = None,
    tags: List[str] = Query(default=[], alias="tag"),
    location: Optional[LocationKind] = None,
    view: WorkspaceView = WorkspaceView.ALL,
    types: List[WorkspaceType] = Query(default=[], alias="type"),
    favorites_only: bool = False,
    pinned_only: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    context: AppContext = Depends(get_context),
):
    """List catalog entries matching the filters, pinned first then most recent."""
    flt = WorkspaceFilter(
        search_text=search,
        tags=tags,
        location=location,
        view=view,
        types=types,
        favorites_only=favorites_only,
        pinned_only=pinned_only,
    )
    items = context.manager.get_workspaces(flt)

    total_count = len(items)
    start_idx = (page - 1) * page_size
    total_pages = (total_count + page_size - 1) // page_size

    return {
        "workspaces": [w.to_dict() for w in items[start_idx:start_idx + page_size]],
        "page": page,
        "page_size": page_size,
        "total_count": total_count,
        "total_pages": total_pages,
    }


@router.get("/api/workspaces/{workspace_id}")
async def get_workspace(workspace_id: str, context: AppContext = Depends(get_context)):
    try:
        return context.manager.get_workspace(workspace_id).to_dict()
    except WorkspaceNotFoundError as e:
        raise _not_found(workspace_id) from e


@router.post("/api/workspaces/{workspace_id}/open")
async def open_workspace(
    workspace_id: str,
    body: Optional[OpenRequest] = None,
    context: AppContext = Depends(get_context),
):
    """Open a workspace in the editor. Launch failures return 502 with guidance."""
    body = body or OpenRequest()
    try:
        result = await context.manager.open_workspace(workspace_id, body.new_window, body.dry_run)
    except WorkspaceNotFoundError as e:
        raise _not_found(workspace_id) from e
    except LaunchError as e:
        logger.error(f"[WEB] Launch failed for {workspace_id}: {e.message}")
        return JSONResponse(
            status_code=502,
            content={"detail": e.message, "guidance": e.guidance},
        )
    return result.to_dict()


@router.patch("/api/workspaces/{workspace_id}")
async def update_workspace(
    workspace_id: str,
    body: WorkspaceUpdate,
    context: AppContext = Depends(get_context),
):
    """Update user-owned fields; omitted fields are left as they are."""
    manager = context.manager
    try:
        workspace = manager.get_workspace(workspace_id)
        if body.is_favorite is not None:
            workspace = manager.set_favorite(workspace_id, body.is_favorite)
        if body.is_pinned is not None:
            workspace = manager.set_pinned(workspace_id, body.is_pinned)
        if body.tags is not None:
            workspace = manager.set_tags(workspace_id, body.tags)
        if body.description is not None:
            workspace = manager.set_description(workspace_id, body.description)
    except WorkspaceNotFoundError as e:
        raise _not_found(workspace_id) from e
    return workspace.to_dict()


@router.delete("/api/workspaces/{workspace_id}")
async def delete_workspace(workspace_id: str, context: AppContext = Depends(get_context)):
    try:
        context.manager.remove_workspace(workspace_id)
    except WorkspaceNotFoundError as e:
        raise _not_found(workspace_id) from e
    return {"removed": workspace_id}
