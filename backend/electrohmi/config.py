from __future__ import annotations

import os
from typing import Optional

_TRUE = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in _TRUE


def env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return int(val.strip())
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return float(val.strip())
    except ValueError:
        return default


def env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return val.strip()


def offline_mode() -> bool:
    return env_flag("OFFLINE_MODE", False) or env_flag("DEMO_OFFLINE", False)


def tick_period_s() -> float:
    # floor at 50 ms
    return max(50, env_int("TICK_PERIOD_MS", 1000)) / 1000.0


def gemini_api_key() -> Optional[str]:
    return env_str("GEMINI_API_KEY") or env_str("GOOGLE_API_KEY") or env_str("API_KEY")
