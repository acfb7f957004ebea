"""
System API Router

Version, installed WSL distributions, reference resolution, history sync
and catalog export/import.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from wsrecall.__version__ import __version__
from wsrecall.shared.errors import HistoryReadError, ImportDataError
from wsrecall.shared.logging.logger import get_logger
from wsrecall.pipeline.context import AppContext
from wsrecall.web.dependencies import get_context

logger = get_logger(__name__)
router = APIRouter(tags=["system"])


class ResolveRequest(BaseModel):
    reference: str
    is_workspace_file: bool = False


class ImportRequest(BaseModel):
    workspaces: Optional[List[Dict[str, Any]]] = None
    tags: Optional[List[Dict[str, Any]]] = None


@router.get("/api/version")
async def get_version():
    """Get application version."""
    return {"version": __version__}


@router.get("/api/system/distributions")
async def get_distributions(context: AppContext = Depends(get_context)):
    """Installed WSL distributions, default first (empty when WSL is unavailable)."""
    return {"distributions": await context.validator.list_distributions()}


@router.post("/api/resolve")
async def resolve_reference(body: ResolveRequest, context: AppContext = Depends(get_context)):
    """Classify a raw reference and build its launch target without opening it."""
    location, target = await context.launcher.resolve(body.reference, body.is_workspace_file)
    return {
        "reference": body.reference,
        "location": location.to_dict(),
        "target": target.to_dict(),
        "command": context.launcher.build_command(target),
    }


@router.post("/api/sync")
async def sync_workspaces(context: AppContext = Depends(get_context)):
    """Merge the editor's recently-opened list into the catalog."""
    try:
        workspaces = await run_in_threadpool(context.sync_service.sync)
    except HistoryReadError as e:
        logger.error(f"[WEB] Sync failed: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"synced": len(workspaces)}


@router.get("/api/export")
async def export_data(context: AppContext = Depends(get_context)):
    return await run_in_threadpool(context.manager.export_data)


@router.post("/api/import")
async def import_data(body: ImportRequest, context: AppContext = Depends(get_context)):
    data = body.model_dump(exclude_none=True)
    try:
        await run_in_threadpool(context.manager.import_data, data)
    except ImportDataError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"imported": len(data.get("workspaces", []))}
