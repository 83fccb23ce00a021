# recipebox/db/store.py
# 레시피 문서 저장소 — 메모리 컬렉션 + 로컬 스냅샷 + 원격(GitHub) 동기화
#
# 데이터 흐름
# 1) 원격 문서(data/recipes.json)가 기준. add/update/remove 마다 전체 문서를 덮어쓴다.
# 2) 로컬 스냅샷은 write-through 캐시 겸 원격 장애 시 폴백.
# 3) 둘 다 없으면 패키지에 들어있는 빈 seed.json 으로 시작.
#
# 변경 연산은 로컬에서 항상 성공한다. 원격 결과는 MutationResult.syncOk 로만 알린다(롤백 없음).
# 변경 연산은 한 번에 하나씩 호출된다고 가정한다 (사용자 1명/프로세스 1개).

from __future__ import annotations
import asyncio
import json
import logging
import uuid
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import httpx
from pydantic import ValidationError

from recipebox.db.github_sync import GitHubContentStore, SyncError
from recipebox.db.snapshot import DB_SLOT, LocalSnapshot
from recipebox.models.categories import CATEGORIES, category_label
from recipebox.models.schemas import (
    CollectionDocument,
    ImportResult,
    MutationResult,
    Recipe,
    StoreStats,
    strip_derived,
)

log = logging.getLogger(__name__)

SEED_PATH = Path(__file__).with_name("seed.json")

def today() -> str:
    return date.today().isoformat()

def new_id() -> str:
    return "r" + uuid.uuid4().hex[:12]


class RecipeStore:
    def __init__(
        self,
        snapshot: LocalSnapshot,
        remote: Optional[GitHubContentStore] = None,
        seed_path: Union[str, Path] = SEED_PATH,
    ):
        self.snapshot = snapshot
        self.remote = remote
        self.seed_path = Path(seed_path)
        self._doc = CollectionDocument()
        self._background: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # 수명주기
    # ------------------------------------------------------------------
    async def initialize(self) -> None:
        """원격 → 로컬 스냅샷 → seed 순으로 시도. 단계 실패는 조용히 다음 단계로."""
        if self.remote is not None and self.remote.configured:
            try:
                raw = await self.remote.read_document()
                if raw is not None:
                    self._doc = CollectionDocument.model_validate(_as_document(raw))
                    self._persist()
                    log.info("[db] loaded %d recipe(s) from remote", len(self._doc.recipes))
                    return
                log.warning("[db] remote returned no document")
            except Exception as e:
                log.warning("[db] remote read failed, falling back to local snapshot: %s", e)

        try:
            raw_local = self.snapshot.read(DB_SLOT)
            if raw_local:
                self._doc = CollectionDocument.model_validate(_as_document(json.loads(raw_local)))
                log.info("[db] using local snapshot — %d recipe(s)", len(self._doc.recipes))
                return
        except (OSError, ValueError, ValidationError) as e:
            log.warning("[db] local snapshot unreadable, loading seed: %s", e)

        self._load_seed()

    def _load_seed(self) -> None:
        try:
            data = json.loads(self.seed_path.read_text(encoding="utf-8"))
            self._doc = CollectionDocument.model_validate(_as_document(data))
        except (OSError, ValueError, ValidationError) as e:
            log.error("[db] failed to load seed %s: %s", self.seed_path, e)
            self._doc = CollectionDocument()
        self._persist()
        log.info("[db] started from seed (%d recipe(s))", len(self._doc.recipes))

    async def reset(self) -> None:
        # 로컬 캐시를 버리고 다시 로드 (원격이 있으면 원격 기준으로 복구)
        self.snapshot.remove(DB_SLOT)
        await self.initialize()

    async def close(self) -> None:
        # 백그라운드 메모 동기화가 남아 있으면 끝날 때까지 기다린다
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _persist(self) -> None:
        self.snapshot.write(DB_SLOT, self.export_json())

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------
    def _index(self, rid: str) -> int:
        for i, r in enumerate(self._doc.recipes):
            if r.id == rid:
                return i
        return -1

    def get_all(self) -> List[Recipe]:
        return [r.model_copy(deep=True) for r in self._doc.recipes]

    def get_by_id(self, rid: str) -> Optional[Recipe]:
        i = self._index(rid)
        return self._doc.recipes[i].model_copy(deep=True) if i >= 0 else None

    def get_by_category(self, category: str) -> List[Recipe]:
        return [r for r in self.get_all() if r.category == category]

    def search(self, query: str) -> List[Recipe]:
        """이름/메모/태그/재료/카테고리 라벨 부분일치 (대소문자 무시)."""
        q = (query or "").strip().lower()
        if not q:
            return self.get_all()
        return [r for r in self.get_all() if _matches(r, q)]

    def stats(self) -> StoreStats:
        counts: Dict[str, int] = {}
        with_notes = 0
        for r in self._doc.recipes:
            counts[r.category] = counts.get(r.category, 0) + 1
            if r.notes.strip():
                with_notes += 1
        return StoreStats(
            total=len(self._doc.recipes),
            categories=len(counts),
            withNotes=with_notes,
            catCounts=counts,
        )

    # ------------------------------------------------------------------
    # 변경
    # ------------------------------------------------------------------
    async def add(self, recipe: Union[Recipe, Dict[str, Any]]) -> MutationResult:
        data = recipe.model_dump() if isinstance(recipe, Recipe) else recipe
        rec = Recipe.model_validate(strip_derived(data))
        if not rec.id or self._index(rec.id) >= 0:
            rec.id = self._unique_id()
        rec.dateAdded = rec.dateAdded or today()
        self._doc.recipes.append(rec)
        self._persist()
        return await self._sync_result(rec.model_copy(deep=True), "add")

    async def update(self, rid: str, fields: Dict[str, Any]) -> Optional[MutationResult]:
        """필드 단위 얕은 교체. 없는 id 면 None."""
        i = self._index(rid)
        if i < 0:
            return None
        patch = {k: v for k, v in strip_derived(fields or {}).items() if k != "id"}
        merged = {**self._doc.recipes[i].model_dump(), **patch, "lastModified": today()}
        self._doc.recipes[i] = Recipe.model_validate(_reconcile_calories(patch, merged))
        self._persist()
        return await self._sync_result(self._doc.recipes[i].model_copy(deep=True), "update")

    def save_note(self, rid: str, text: str) -> Optional[Recipe]:
        """메모만 저장. 원격 동기화는 백그라운드 태스크로 던지고 기다리지 않는다."""
        i = self._index(rid)
        if i < 0:
            return None
        rec = self._doc.recipes[i]
        rec.notes = text or ""
        rec.lastModified = today()
        self._persist()
        self._spawn_sync("save_note")
        return rec.model_copy(deep=True)

    async def remove(self, rid: str) -> Optional[MutationResult]:
        i = self._index(rid)
        if i < 0:
            return None
        removed = self._doc.recipes.pop(i)
        self._persist()
        return await self._sync_result(removed, "remove")

    async def push(self) -> MutationResult:
        # 현재 문서 전체를 원격에 명시적으로 올린다 (가져오기 직후 등)
        return await self._sync_result(None, "push")

    # ------------------------------------------------------------------
    # 가져오기/내보내기
    # ------------------------------------------------------------------
    def export_json(self) -> str:
        return json.dumps(self._doc.model_dump(mode="json"), indent=2, ensure_ascii=False)

    def import_json(self, text: str) -> ImportResult:
        """id 기준 병합: 같은 id 는 덮어쓰고(위치 유지), 새 id 는 뒤에 붙인다. 삭제는 없음."""
        try:
            data = json.loads(text)
            incoming = data if isinstance(data, list) else (data or {}).get("recipes") or []
            records = [Recipe.model_validate(strip_derived(r) if isinstance(r, dict) else r) for r in incoming]
        except (ValueError, AttributeError, TypeError, ValidationError) as e:
            return ImportResult(success=False, error=str(e))

        merged: Dict[str, Recipe] = {r.id: r for r in self._doc.recipes}
        for rec in records:
            if not rec.id:
                rec.id = self._unique_id(merged)
            merged[rec.id] = rec
        self._doc.recipes = list(merged.values())
        self._persist()
        log.info("[db] imported %d recipe(s)", len(records))
        return ImportResult(success=True, count=len(records))

    # ------------------------------------------------------------------
    # 내부
    # ------------------------------------------------------------------
    def _unique_id(self, taken: Optional[Dict[str, Any]] = None) -> str:
        ids = set(taken) if taken is not None else {r.id for r in self._doc.recipes}
        rid = new_id()
        while rid in ids:
            rid = new_id()
        return rid

    async def _sync(self) -> None:
        if self.remote is None:
            raise SyncError("remote sync is not configured")
        await self.remote.write_document(self._doc.model_dump(mode="json"))

    async def _sync_result(self, recipe: Optional[Recipe], op: str) -> MutationResult:
        try:
            await self._sync()
        except (SyncError, httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            log.warning("[db] %s() sync failed: %s", op, e)
            return MutationResult(recipe=recipe, syncOk=False, syncError=str(e))
        return MutationResult(recipe=recipe, syncOk=True)

    def _spawn_sync(self, op: str) -> None:
        try:
            task = asyncio.get_running_loop().create_task(self._sync())
        except RuntimeError:
            log.warning("[db] %s(): no running event loop, remote sync skipped", op)
            return
        self._background.add(task)
        task.add_done_callback(lambda t: self._on_background_done(t, op))

    def _on_background_done(self, task: asyncio.Task, op: str) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            log.warning("[db] %s() background sync failed: %s", op, err)


def _as_document(raw: Any) -> Any:
    # 배열만 있는 옛 형식도 받아준다
    return {"recipes": raw} if isinstance(raw, list) else raw

def _reconcile_calories(patch: Dict[str, Any], merged: Dict[str, Any]) -> Dict[str, Any]:
    # 두 칼로리 사본은 이번에 바뀐 쪽을 따라간다 (calories=0 '모름' 도 그대로 반영)
    nutrition = merged.get("nutrition")
    if "calories" in patch:
        if isinstance(nutrition, dict) and nutrition:
            merged["nutrition"] = {**nutrition, "calories": patch["calories"]}
    elif isinstance(patch.get("nutrition"), dict) and "calories" in patch["nutrition"]:
        merged["calories"] = patch["nutrition"]["calories"]
    return merged

def _matches(r: Recipe, q: str) -> bool:
    return (
        q in r.name.lower()
        or q in r.notes.lower()
        or any(q in t.lower() for t in r.tags)
        or any(q in i.lower() for i in r.ingredients)
        or q in category_label(r.category).lower()
    )

def group_by_category(recipes: List[Recipe]) -> Dict[str, List[Recipe]]:
    """분류표 순서대로 묶고, 분류표에 없는 카테고리는 처음 나온 순서대로 뒤에 붙인다."""
    grouped: Dict[str, List[Recipe]] = {}
    for r in recipes:
        grouped.setdefault(r.category, []).append(r)
    ordered = {k: grouped[k] for k in CATEGORIES if k in grouped}
    for k, v in grouped.items():
        if k not in ordered:
            ordered[k] = v
    return ordered
