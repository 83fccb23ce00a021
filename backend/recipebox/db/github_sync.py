# recipebox/db/github_sync.py
# 원격 문서 저장소 어댑터 — GitHub Contents API (파일 경로 단위 read/write)
# 동시성: 쓰기 직전에 현재 sha(버전 태그)를 읽어 같이 보낸다 (낙관적 동시성).
#   sha 조회와 PUT 사이에 다른 세션이 쓰면 그 변경은 덮어써진다 — 병합하지 않는다(알려진 한계).
# 설정은 호출 시점마다 다시 읽는다 (설정 화면에서 바꾸면 바로 반영)

from __future__ import annotations
import base64
import json
import logging
from datetime import date
from typing import Any, Callable, Dict, Optional

import httpx

from recipebox.models.schemas import SyncSettings

log = logging.getLogger(__name__)

COMMIT_PREFIX = "recipebox: auto-sync"


class SyncError(Exception):
    # 원격 쓰기 거절/자격증명 없음
    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")

def decode_content(b64: str) -> str:
    # API 는 60자마다 줄바꿈을 넣어서 준다
    return base64.b64decode((b64 or "").replace("\n", "")).decode("utf-8")


class GitHubContentStore:
    def __init__(
        self,
        settings_loader: Callable[[], SyncSettings],
        path: str = "data/recipes.json",
        api_base: str = "https://api.github.com",
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings_loader = settings_loader
        self.path = path
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return self.settings_loader().configured

    def _url(self, s: SyncSettings) -> str:
        return f"{self.api_base}/repos/{s.githubOwner}/{s.githubRepo}/contents/{self.path}"

    def _headers(self, s: SyncSettings) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {s.githubToken}",
            "Accept": "application/vnd.github+json",
        }

    def _client(self, s: SyncSettings) -> httpx.AsyncClient:
        return httpx.AsyncClient(headers=self._headers(s), timeout=self.timeout, transport=self.transport)

    async def read_document(self) -> Optional[Any]:
        """원격 JSON 문서. 200 이 아니면 None (에러가 아니라 '없음')."""
        s = self.settings_loader()
        if not s.configured:
            return None
        async with self._client(s) as cli:
            r = await cli.get(self._url(s), params={"ref": s.githubBranch or "main"})
        if not r.is_success:
            log.warning("[sync] read %s -> HTTP %s", self.path, r.status_code)
            return None
        content = r.json().get("content")
        if not content:
            return None
        return json.loads(decode_content(content))

    async def _current_sha(self, cli: httpx.AsyncClient, s: SyncSettings) -> Optional[str]:
        # 실패하면 sha 없이 진행 (새 파일 생성으로 취급 — 최초 1회 쓰기에서만 맞는 동작)
        try:
            r = await cli.get(self._url(s), params={"ref": s.githubBranch or "main"})
            if r.is_success:
                return r.json().get("sha")
        except (httpx.HTTPError, ValueError) as e:
            log.warning("[sync] sha lookup failed: %s", e)
        return None

    async def write_document(self, doc: Any) -> Dict[str, Any]:
        """문서 전체를 덮어쓴다. 실패하면 SyncError(status, body)."""
        s = self.settings_loader()
        if not s.configured:
            raise SyncError("GitHub credentials not configured (token/owner/repo)")
        text = json.dumps(doc, indent=2, ensure_ascii=False)
        async with self._client(s) as cli:
            sha = await self._current_sha(cli, s)
            body: Dict[str, Any] = {
                "message": f"{COMMIT_PREFIX} {date.today().isoformat()}",
                "content": encode_content(text),
                "branch": s.githubBranch or "main",
            }
            if sha:
                body["sha"] = sha
            r = await cli.put(self._url(s), json=body)
        if not r.is_success:
            raise SyncError(f"GitHub API {r.status_code}: {r.text}", status=r.status_code, body=r.text)
        log.info("[sync] wrote %s (%d bytes)", self.path, len(text))
        return r.json()
