# recipebox/db/snapshot.py
# 로컬 스냅샷 저장소 — 이름 있는 슬롯 하나 = JSON 파일 하나
# 쓰기는 항상 통째로 덮어쓰기(임시 파일 → os.replace), 부분 쓰기/추가 로그 없음

from __future__ import annotations
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

log = logging.getLogger(__name__)

DB_SLOT = "recipebox_db"
SETTINGS_SLOT = "recipebox_settings"


class LocalSnapshot:
    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, slot: str) -> Path:
        return self.directory / f"{slot}.json"

    def read(self, slot: str) -> Optional[str]:
        p = self._path(slot)
        if not p.exists():
            return None
        return p.read_text(encoding="utf-8")

    def write(self, slot: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{slot}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self._path(slot))
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def remove(self, slot: str) -> None:
        p = self._path(slot)
        if p.exists():
            p.unlink()
            log.info("[snapshot] removed slot %s", slot)
