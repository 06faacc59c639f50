"""
Boundary snapshot cache — simple per-kind JSON files.

Used as fallback when a live yfinance fetch fails. The analysis engines never
read this; only the ingestion agent does.
Kinds: "etf_holdings", "sectors"

Cache files: {CACHE_DIR}/etf_holdings_snapshot.json, {CACHE_DIR}/sectors_snapshot.json
Each file: { "fetched_at": "2026-02-27T10:30:00", "records": {symbol: {...}} }

Records are merged by symbol, so a partial fetch refreshes what it got and
keeps older entries for the rest.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from config import CACHE_DIR

logger = logging.getLogger(__name__)


def _path(kind: str, cache_dir: Optional[Path] = None) -> Path:
    d = Path(cache_dir) if cache_dir is not None else CACHE_DIR
    return d / f"{kind}_snapshot.json"


def save(kind: str, records: dict[str, dict], cache_dir: Optional[Path] = None) -> None:
    """Persist a successful fetch to disk, merged over what is already cached."""
    existing = load(kind, cache_dir)
    merged = dict(existing[0]) if existing else {}
    merged.update(records)

    data = {
        "fetched_at": datetime.now().isoformat(timespec="seconds"),
        "records": merged,
    }
    path = _path(kind, cache_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def load(kind: str, cache_dir: Optional[Path] = None) -> tuple[dict[str, dict], str] | None:
    """
    Load the last cached snapshot for a kind.

    Returns:
        (records_by_symbol, fetched_at_str)  if cache exists
        None                                 if no cache file or it is unreadable
    """
    p = _path(kind, cache_dir)
    if not p.exists():
        return None
    try:
        with open(p) as f:
            data = json.load(f)
        return data["records"], data["fetched_at"]
    except (OSError, ValueError, KeyError) as e:
        logger.warning("ignoring unreadable cache %s: %s", p, e)
        return None
