# recipebox/services/scraper/relays.py
# 목적: 제3자 레시피 페이지 HTML 가져오기 — 릴레이 목록을 순서대로 하나씩 시도
# 의존: httpx
# 규칙: 동시 요청 없음(가장 빠른 것이 아니라 '처음 되는 것'), 시도마다 독립 타임아웃,
#      너무 짧은 응답(에러 페이지/빈 본문)은 실패로 취급하고 다음 릴레이로 넘어간다

from __future__ import annotations
import asyncio
import logging
from typing import Callable, List, Optional, Sequence
from urllib.parse import quote

import httpx

log = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_3) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/125.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

# 진짜 HTML 이면 최소 이 정도는 된다
MIN_HTML_LENGTH = 500
DEFAULT_TIMEOUT = 14.0

def _read_text(r: httpx.Response) -> Optional[str]:
    return r.text

def _read_contents(r: httpx.Response) -> Optional[str]:
    # {"contents": "<html>..."} 형태로 감싸서 주는 릴레이
    data = r.json()
    if not isinstance(data, dict):
        return None
    contents = data.get("contents")
    return contents if isinstance(contents, str) else None


class Relay:
    """요청 URL 만드는 법 + 응답에서 HTML 꺼내는 법."""

    def __init__(self, name: str, template: str, read: Callable[[httpx.Response], Optional[str]] = _read_text):
        self.name = name
        self.template = template
        self.read = read

    def build(self, url: str) -> str:
        # {url}: 인코딩된 대상 URL, {raw}: 원본 그대로
        return self.template.format(url=quote(url, safe=""), raw=url)

    def __repr__(self) -> str:
        return f"Relay({self.name!r})"


DEFAULT_RELAYS: List[Relay] = [
    # 서버 쪽이라 CORS 제약이 없으니 직접 요청이 1순위
    Relay("direct", "{raw}"),
    Relay("allorigins-get", "https://api.allorigins.win/get?url={url}", _read_contents),
    Relay("allorigins-raw", "https://api.allorigins.win/raw?url={url}"),
    Relay("corsproxy", "https://corsproxy.io/?{url}"),
    Relay("codetabs", "https://api.codetabs.com/v1/proxy?quest={url}"),
    Relay("thingproxy", "https://thingproxy.freeboard.io/fetch/{url}"),
]


def looks_like_html(text: Optional[str]) -> bool:
    return isinstance(text, str) and len(text) > MIN_HTML_LENGTH


async def _attempt(client: httpx.AsyncClient, relay: Relay, url: str, timeout: float) -> Optional[str]:
    r = await asyncio.wait_for(client.get(relay.build(url)), timeout=timeout)
    if not r.is_success:
        log.warning("[scraper] relay %s -> HTTP %s", relay.name, r.status_code)
        return None
    return relay.read(r)


async def fetch_page(
    url: str,
    relays: Sequence[Relay] = DEFAULT_RELAYS,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[str]:
    """첫 번째로 '그럴듯한 HTML'을 돌려준 릴레이의 본문. 전부 실패하면 None."""
    async with httpx.AsyncClient(
        headers=HEADERS,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        transport=transport,
    ) as client:
        for relay in relays:
            try:
                text = await _attempt(client, relay, url, timeout)
            except asyncio.TimeoutError:
                log.warning("[scraper] relay %s timed out after %.1fs", relay.name, timeout)
                continue
            except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
                log.warning("[scraper] relay %s failed: %s", relay.name, e)
                continue
            if looks_like_html(text):
                log.info("[scraper] fetched %s via %s (%d chars)", url, relay.name, len(text))
                return text
            log.warning("[scraper] relay %s returned too little content", relay.name)
    return None
