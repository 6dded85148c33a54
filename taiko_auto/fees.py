# taiko_auto/fees.py
import threading
from typing import Dict


class FeeLedger:
    """Cumulative fee paid per wallet index, in wei. Entries only grow."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fees: Dict[int, int] = {}

    def add(self, wallet_index: int, fee: int) -> int:
        fee = int(fee)
        if fee < 0:
            raise ValueError(f"fee must be non-negative, got {fee}")
        with self._lock:
            total = self._fees.get(wallet_index, 0) + fee
            self._fees[wallet_index] = total
            return total

    def get(self, wallet_index: int) -> int:
        with self._lock:
            return self._fees.get(wallet_index, 0)

    def snapshot(self) -> Dict[int, int]:
        with self._lock:
            return dict(self._fees)

    def total(self) -> int:
        with self._lock:
            return sum(self._fees.values())
