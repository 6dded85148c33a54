# taiko_auto/points.py
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import requests
from .config import POINTS_API_URL, POINTS_TIMEOUT
from .util import get_logger, short
log = get_logger()


@dataclass(frozen=True)
class Score:
    total_points: float
    rank: int


@dataclass(frozen=True)
class ScoreSample:
    iteration: int
    points_earned: float
    total_points: float
    rank: int
    rank_change: int  # positive = climbed


# -------------------- HTTP --------------------
def _safe_get(url: str, params: dict, timeout: int, retries: int = 3, backoff: float = 0.8) -> Any:
    for i in range(retries):
        try:
            r = requests.get(url, params=params, timeout=timeout)
            r.raise_for_status()
            return r.json()
        except requests.exceptions.ConnectionError as e:
            log.warning(f"[points] network error: {e} (attempt {i+1}/{retries})")
            if i == retries - 1:
                raise
            time.sleep(backoff * (2 ** i))

def _parse_score(body: Any) -> Optional[Score]:
    if not isinstance(body, dict):
        return None
    data = body.get("data") if isinstance(body.get("data"), dict) else body
    total = data.get("totalPoints", data.get("total_points"))
    rank = data.get("rank")
    if total is None or rank is None:
        return None
    return Score(total_points=float(total), rank=int(rank))

def fetch_score(address: str, url: str = POINTS_API_URL, timeout: int = POINTS_TIMEOUT) -> Optional[Score]:
    """Look up points/rank for an address. None when disabled or unavailable."""
    if not url:
        return None
    try:
        return _parse_score(_safe_get(url, {"address": address}, timeout))
    except (requests.exceptions.RequestException, ValueError, TypeError) as e:
        log.warning(f"[points] lookup failed for {short(address)}: {e}")
        return None


class ScoreBook:
    """Append-only per-wallet score history."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._samples: Dict[int, List[ScoreSample]] = {}

    def record(self, wallet_index: int, iteration: int,
               before: Optional[Score], after: Score) -> ScoreSample:
        if before is None:
            earned, rank_change = after.total_points, 0
        else:
            earned = after.total_points - before.total_points
            rank_change = before.rank - after.rank
        sample = ScoreSample(iteration, earned, after.total_points, after.rank, rank_change)
        with self._lock:
            self._samples.setdefault(wallet_index, []).append(sample)
        return sample

    def history(self, wallet_index: int) -> List[ScoreSample]:
        with self._lock:
            return list(self._samples.get(wallet_index, []))

    def wallets(self) -> List[int]:
        with self._lock:
            return sorted(self._samples)
