from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

RUNS_DIRNAME = '.reportkit'


def runs_root(output_dir: Path) -> Path:
    root = output_dir / RUNS_DIRNAME
    root.mkdir(parents=True, exist_ok=True)
    return root


def _safe_run_name(output_name: str) -> str:
    token = str(output_name or '').strip().strip('/')
    if not token:
        raise ValueError('output_name is required')
    return token.replace('/', '__').replace('\\', '__')


def state_path(output_dir: Path, output_name: str) -> Path:
    return runs_root(output_dir) / f'{_safe_run_name(output_name)}.json'


def events_path(output_dir: Path, output_name: str) -> Path:
    return runs_root(output_dir) / f'{_safe_run_name(output_name)}.events.jsonl'


def write_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding='utf-8')
    tmp.replace(path)


def write_text_atomic(path: Path, content: str, *, encoding: str = 'utf-8', errors: str | None = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_text(content, encoding=encoding, errors=errors)
    tmp.replace(path)


def append_event(path: Path, event: str, **extra: Any) -> None:
    now = datetime.now(timezone.utc).isoformat()
    row = {
        'ts': now,
        'event': event,
        **extra,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open('a', encoding='utf-8') as f:
        f.write(json.dumps(row, ensure_ascii=False) + '\n')
