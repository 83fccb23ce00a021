# recipebox/services/sync_settings.py
# 동기화 설정 3단 병합: 하드코딩 기본값 ← 환경(.env) 기본값 ← 로컬 저장 오버라이드
# 규칙: 비어있지 않은 값만 아래 단계를 덮는다 (빈 문자열/None 은 무시)

from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional

from recipebox.core.config import Settings, settings as default_settings
from recipebox.db.snapshot import SETTINGS_SLOT, LocalSnapshot
from recipebox.models.schemas import SyncSettings

log = logging.getLogger(__name__)

FALLBACK: Dict[str, str] = SyncSettings().model_dump()

def _baked(cfg: Settings) -> Dict[str, Any]:
    return {
        "githubToken": cfg.GITHUB_TOKEN,
        "githubOwner": cfg.GITHUB_OWNER,
        "githubRepo": cfg.GITHUB_REPO,
        "githubBranch": cfg.GITHUB_BRANCH,
    }

def _overlay(base: Dict[str, Any], layer: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (layer or {}).items():
        if k in out and v not in ("", None):
            out[k] = str(v)
    return out

def read_overrides(snapshot: LocalSnapshot) -> Dict[str, Any]:
    raw = snapshot.read(SETTINGS_SLOT)
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError as e:
        log.warning("[settings] stored overrides unreadable, ignoring: %s", e)
        return {}
    return data if isinstance(data, dict) else {}

def load_sync_settings(snapshot: LocalSnapshot, cfg: Optional[Settings] = None) -> SyncSettings:
    merged = _overlay(FALLBACK, _baked(cfg or default_settings))
    merged = _overlay(merged, read_overrides(snapshot))
    return SyncSettings(**merged)

def save_sync_settings(snapshot: LocalSnapshot, updates: Dict[str, Any], cfg: Optional[Settings] = None) -> SyncSettings:
    # 저장본 = 기존 오버라이드 + 새 값. 환경 기본값(토큰 등)은 디스크로 복사하지 않는다
    stored = {**read_overrides(snapshot), **{k: v for k, v in (updates or {}).items() if k in FALLBACK}}
    snapshot.write(SETTINGS_SLOT, json.dumps(stored, ensure_ascii=False))
    return load_sync_settings(snapshot, cfg)
