# recipebox/api/routes_scrape.py
# URL → 레시피 후보(미저장 초안). 사용자가 확인 후 POST /recipes 로 저장한다
# 스크레이퍼는 실패해도 예외 대신 scrapeOk=false 뼈대를 준다 → 여기서도 항상 200

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from recipebox.core.deps import get_scraper
from recipebox.models.schemas import RecipeCandidate
from recipebox.services.scraper.engine import RecipeScraper

router = APIRouter(prefix="/scrape", tags=["scrape"])

class ScrapeIn(BaseModel):
    url: str

@router.post("", response_model=RecipeCandidate)
async def scrape_url(body: ScrapeIn, scraper: RecipeScraper = Depends(get_scraper)):
    return await scraper.scrape(body.url.strip())
