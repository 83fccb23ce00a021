# recipebox/main.py
# FastAPI 앱 초기화 및 라우터 설정
# 저장소/스크레이퍼는 시작 이벤트에서 명시적으로 만들고 app.state 에 둔다 (모듈 전역 싱글턴 없음)

from __future__ import annotations
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recipebox.api.routes_recipes import categories_router, router as recipes_router
from recipebox.api.routes_scrape import router as scrape_router
from recipebox.api.routes_settings import router as settings_router
from recipebox.core.config import settings
from recipebox.db.github_sync import GitHubContentStore
from recipebox.db.snapshot import LocalSnapshot
from recipebox.db.store import RecipeStore
from recipebox.services.scraper.engine import RecipeScraper
from recipebox.services.sync_settings import load_sync_settings

log = logging.getLogger(__name__)

def build_store(data_dir: Optional[str] = None) -> RecipeStore:
    snapshot = LocalSnapshot(data_dir or settings.DATA_DIR)
    remote = GitHubContentStore(
        lambda: load_sync_settings(snapshot),
        path=settings.SYNC_PATH,
        api_base=settings.GITHUB_API,
        timeout=settings.SYNC_TIMEOUT,
    )
    return RecipeStore(snapshot, remote)

def create_app(store: Optional[RecipeStore] = None, scraper: Optional[RecipeScraper] = None) -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="RecipeBox - API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        app.state.store = store or build_store()
        app.state.scraper = scraper or RecipeScraper()
        await app.state.store.initialize()
        log.info("[startup] store ready (%d recipes)", app.state.store.stats().total)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        # 백그라운드 메모 동기화 마무리
        await app.state.store.close()

    @app.get("/health")
    async def health():
        s = load_sync_settings(app.state.store.snapshot)
        return {"status": "ok", "sync": "configured" if s.configured else "local-only"}

    # 라우터 prefix는 각 파일 내에서 정의함
    app.include_router(categories_router)
    app.include_router(recipes_router)
    app.include_router(scrape_router)
    app.include_router(settings_router)
    return app

app = create_app()
