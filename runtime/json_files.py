from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger("mongolog.json_files")


def ensure_file(path: Path, initial: str) -> bool:
    """Create path with initial content if missing. Returns True if created."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        return False
    logger.warning("data file %s not found, creating a new one", path)
    path.write_text(initial, encoding="utf-8")
    return True


def read_json_list(path: Path) -> List[Dict[str, Any]]:
    """Читает JSON-массив объектов.

    Отсутствующий файл -> пустой список. Битый JSON логируется и тоже
    даёт пустой список: отчёт по пустым данным упадёт в NoData, а не
    в трейсбек посреди диалога.
    """
    try:
        raw = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return []
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("broken JSON in %s: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.error("%s: expected a JSON array, got %s", path, type(data).__name__)
        return []
    return [x for x in data if isinstance(x, dict)]


def iter_jsonl(path: Path) -> Iterator[Dict[str, Any]]:
    try:
        f = path.open("r", encoding="utf-8")
    except FileNotFoundError:
        return
    with f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("%s:%d: skipping broken line", path, lineno)
                continue
            if isinstance(obj, dict):
                yield obj


def write_json_atomic(path: Path, data: Any) -> None:
    """Атомарная запись: tmp-файл в той же папке + os.replace."""
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)

    fd: Optional[int] = None
    tmp_path: Optional[str] = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=path.stem + "_", suffix=".tmp", dir=str(directory))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fd = None  # закрывается через fdopen
            if path.suffix == ".jsonl":
                for row in data:
                    f.write(json.dumps(row, ensure_ascii=False, separators=(",", ":")) + "\n")
            else:
                json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
        tmp_path = None
    finally:
        if tmp_path is not None:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
        if fd is not None:
            try:
                os.close(fd)
            except OSError:
                pass


def append_jsonl(path: Path, rows: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row, ensure_ascii=False, separators=(",", ":")) + "\n")
