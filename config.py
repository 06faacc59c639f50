"""
Runtime configuration — loaded from the environment (.env supported).

Only I/O-facing knobs live here. Analysis thresholds (concentration limits,
sentiment lexicons, agreement bands) are module constants inside analysis/
and stay fixed.
"""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Boundary cache (ETF holdings + sector tags) ───────────────────────────────
CACHE_DIR = Path(os.getenv("PORTFOLIO_CACHE_DIR", ".cache"))

# ── Price history ─────────────────────────────────────────────────────────────
PRICE_PERIOD   = os.getenv("PRICE_PERIOD", "1y")
PRICE_INTERVAL = os.getenv("PRICE_INTERVAL", "1d")
