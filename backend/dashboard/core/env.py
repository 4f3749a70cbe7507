"""Process configuration from environment variables.

- An optional `.env` at the repo root or in `backend/` is loaded first.
- Existing environment variables win unless override=True.
- No external dependency required.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final


JWT_SECRET_ENV: Final[str] = "EXP_JWT_SECRET"
CORS_ORIGINS_ENV: Final[str] = "EXP_CORS_ORIGINS"

DEFAULT_CORS_ORIGINS: Final[tuple[str, ...]] = ("http://localhost:5173", "http://127.0.0.1:5173")


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    value = value.strip()
    if not key:
        return None
    # KEY="value" or KEY='value'
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key, value


def load_env_if_present(*, override: bool = False) -> None:
    # backend/dashboard/core/env.py -> repo root is parents[3]
    repo_root = Path(__file__).resolve().parents[3]
    for p in (repo_root / ".env", repo_root / "backend" / ".env"):
        if not p.is_file():
            continue
        try:
            content = p.read_text(encoding="utf-8")
        except OSError:
            continue
        for raw in content.splitlines():
            parsed = _parse_env_line(raw)
            if not parsed:
                continue
            k, v = parsed
            if not override and k in os.environ:
                continue
            os.environ[k] = v


def get_jwt_secret() -> bytes:
    load_env_if_present()
    secret = os.environ.get(JWT_SECRET_ENV)
    if not secret:
        raise RuntimeError(f"Missing required env var {JWT_SECRET_ENV}.")
    return secret.encode("utf-8")


def get_cors_origins() -> list[str]:
    load_env_if_present()
    raw = os.environ.get(CORS_ORIGINS_ENV)
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]
