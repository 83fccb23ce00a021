# recipebox/scripts/scrape_url.py
# 사용: python -m recipebox.scripts.scrape_url https://example.com/best-beef-stew [--save]
# URL 하나를 긁어서 후보 JSON 을 출력. --save 면 로컬 저장소에 추가(원격 동기화 시도 포함)
import argparse
import asyncio
import json
import logging

from recipebox.main import build_store
from recipebox.services.scraper.engine import RecipeScraper

async def main(url: str, save: bool = False) -> int:
    candidate = await RecipeScraper().scrape(url)
    print(json.dumps(candidate.model_dump(), indent=2, ensure_ascii=False))
    if not save:
        return 0 if candidate.scrapeOk else 1

    store = build_store()
    await store.initialize()
    result = await store.add(candidate.to_recipe())
    await store.close()
    print(f"saved: {result.recipe.id} (synced: {result.syncOk})")
    if result.syncError:
        print("sync error:", result.syncError)
    return 0

if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="scrape a recipe page")
    ap.add_argument("url")
    ap.add_argument("--save", action="store_true", help="add the candidate to the local store")
    args = ap.parse_args()
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(asyncio.run(main(args.url, save=args.save)))
