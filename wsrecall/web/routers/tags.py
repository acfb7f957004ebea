"""
Tag Endpoints
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from wsrecall.shared.errors import DuplicateTagError, TagNotFoundError
from wsrecall.pipeline.context import AppContext
from wsrecall.web.dependencies import get_context

router = APIRouter(tags=["tags"])


class TagCreate(BaseModel):
    name: str
    color: Optional[str] = None
    description: Optional[str] = None


@router.get("/api/tags")
async def list_tags(context: AppContext = Depends(get_context)):
    return {"tags": [t.to_dict() for t in context.manager.get_tags()]}


@router.post("/api/tags", status_code=201)
async def create_tag(body: TagCreate, context: AppContext = Depends(get_context)):
    try:
        tag = context.manager.add_custom_tag(body.name, body.color, body.description)
    except DuplicateTagError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return tag.to_dict()


@router.delete("/api/tags/{tag_id}")
async def delete_tag(tag_id: str, context: AppContext = Depends(get_context)):
    try:
        context.manager.remove_tag(tag_id)
    except TagNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"removed": tag_id}
