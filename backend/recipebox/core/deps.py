# recipebox/core/deps.py
# 공용 의존성 — 앱 시작 때 만든 저장소/스크레이퍼를 라우터에 주입
from fastapi import Request

from recipebox.db.store import RecipeStore
from recipebox.services.scraper.engine import RecipeScraper

def get_store(request: Request) -> RecipeStore:
    return request.app.state.store

def get_scraper(request: Request) -> RecipeScraper:
    return request.app.state.scraper
