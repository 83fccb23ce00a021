# recipebox/api/routes_recipes.py
# 레시피 CRUD/검색/통계/가져오기·내보내기
# 변경 응답은 MutationResult — 로컬 저장은 성공, 원격 동기화 여부는 syncOk/syncError 로 표시

from __future__ import annotations
import json
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import BaseModel, ValidationError

from recipebox.core.deps import get_store
from recipebox.db.store import RecipeStore, group_by_category
from recipebox.models.categories import CATEGORIES
from recipebox.models.schemas import (
    ImportResult,
    ManualRecipeIn,
    MutationResult,
    Recipe,
    StoreStats,
    is_link_out,
)

router = APIRouter(prefix="/recipes", tags=["recipes"])
categories_router = APIRouter(tags=["categories"])

class NoteIn(BaseModel):
    notes: str = ""

def _card(r: Recipe) -> Dict[str, Any]:
    # 목록용: 저장 필드 + 파생 속성(linkOut)
    return {**r.model_dump(), "linkOut": is_link_out(r)}

def _not_found(rid: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"recipe not found: {rid}")

@categories_router.get("/categories")
async def list_categories():
    return CATEGORIES

@router.get("")
async def list_recipes(
    q: str = "",
    category: Optional[str] = None,
    store: RecipeStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    recipes = store.search(q)
    if category and category != "all":
        recipes = [r for r in recipes if r.category == category]
    return [_card(r) for r in recipes]

@router.get("/grouped")
async def list_grouped(q: str = "", store: RecipeStore = Depends(get_store)):
    grouped = group_by_category(store.search(q))
    return {k: [_card(r) for r in v] for k, v in grouped.items()}

@router.get("/stats", response_model=StoreStats)
async def recipe_stats(store: RecipeStore = Depends(get_store)):
    return store.stats()

@router.get("/export")
async def export_recipes(store: RecipeStore = Depends(get_store)):
    return Response(content=store.export_json(), media_type="application/json")

@router.post("/import", response_model=ImportResult)
async def import_recipes(
    payload: Union[List[Any], Dict[str, Any]] = Body(...),
    store: RecipeStore = Depends(get_store),
):
    # 배열만 보내도 되고 {version, recipes} 문서 통째로 보내도 된다
    result = store.import_json(json.dumps(payload))
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result

@router.post("/reset")
async def reset_recipes(store: RecipeStore = Depends(get_store)):
    await store.reset()
    return {"ok": True, "total": store.stats().total}

@router.post("/sync", response_model=MutationResult)
async def sync_recipes(store: RecipeStore = Depends(get_store)):
    return await store.push()

@router.get("/{rid}")
async def get_recipe(rid: str, store: RecipeStore = Depends(get_store)):
    r = store.get_by_id(rid)
    if r is None:
        raise _not_found(rid)
    return _card(r)

@router.post("", response_model=MutationResult)
async def add_recipe(body: ManualRecipeIn, store: RecipeStore = Depends(get_store)):
    return await store.add(body.to_recipe())

@router.post("/accept", response_model=MutationResult)
async def accept_candidate(body: Recipe, store: RecipeStore = Depends(get_store)):
    # 스크레이퍼 후보를 그대로 저장 (이름은 필수)
    if not body.name.strip():
        raise HTTPException(status_code=422, detail="Recipe name is required")
    data = body.model_dump()
    data.pop("scrapeOk", None)
    return await store.add(data)

@router.patch("/{rid}", response_model=MutationResult)
async def update_recipe(rid: str, fields: Dict[str, Any] = Body(...), store: RecipeStore = Depends(get_store)):
    try:
        result = await store.update(rid, fields)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if result is None:
        raise _not_found(rid)
    return result

@router.put("/{rid}/notes", status_code=202)
async def save_note(rid: str, body: NoteIn, store: RecipeStore = Depends(get_store)):
    # 원격 동기화는 기다리지 않는다
    r = store.save_note(rid, body.notes)
    if r is None:
        raise _not_found(rid)
    return {"ok": True, "id": r.id, "lastModified": r.lastModified}

@router.delete("/{rid}", response_model=MutationResult)
async def delete_recipe(rid: str, store: RecipeStore = Depends(get_store)):
    result = await store.remove(rid)
    if result is None:
        raise _not_found(rid)
    return result
