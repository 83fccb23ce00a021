# recipebox/api/routes_settings.py
# 동기화 설정 조회/저장 — 토큰은 조회 시 가린다

from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from recipebox.core.deps import get_store
from recipebox.db.store import RecipeStore
from recipebox.services.sync_settings import load_sync_settings, save_sync_settings

router = APIRouter(prefix="/settings", tags=["settings"])

class SettingsIn(BaseModel):
    githubToken: Optional[str] = None
    githubOwner: Optional[str] = None
    githubRepo: Optional[str] = None
    githubBranch: Optional[str] = None

@router.get("")
async def get_settings(store: RecipeStore = Depends(get_store)):
    s = load_sync_settings(store.snapshot)
    return {"configured": s.configured, **s.masked()}

@router.put("")
async def put_settings(body: SettingsIn, store: RecipeStore = Depends(get_store)):
    s = save_sync_settings(store.snapshot, body.model_dump(exclude_none=True))
    return {"configured": s.configured, **s.masked()}
