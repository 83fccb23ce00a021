# recipebox/core/config.py
# 환경변수 로딩 (.env) — 동기화 자격증명은 소스에 박지 않고 환경에서만 받는다
from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # 원격 문서 저장소(GitHub Contents API) 기본값 — 로컬 오버라이드가 있으면 그쪽이 이긴다
    GITHUB_TOKEN: str = ""
    GITHUB_OWNER: str = ""
    GITHUB_REPO: str = ""
    GITHUB_BRANCH: str = "main"
    GITHUB_API: str = "https://api.github.com"
    SYNC_PATH: str = "data/recipes.json"
    SYNC_TIMEOUT: float = 20.0

    # 로컬 스냅샷 디렉터리 (슬롯 하나 = 파일 하나)
    DATA_DIR: str = ".recipebox"

    # 스크레이퍼: 릴레이 1회 시도당 제한 시간(초)
    RELAY_TIMEOUT: float = 14.0

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"

settings = Settings()
