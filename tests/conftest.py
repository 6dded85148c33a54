"""
Pytest fixtures and fakes for taiko_auto tests.

Nothing here touches the network: endpoints, submitters and sleeps are
scripted so retry/poll behavior can be asserted without waiting.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional

import pytest

from taiko_auto.operations import Operation


def make_receipt(
    tx_hash: str = "0x" + "a" * 64,
    block: Optional[int] = 100,
    gas_used: Optional[int] = 21_000,
    price: Optional[int] = 10,
    status: Optional[int] = 1,
) -> dict:
    raw = {"transactionHash": tx_hash, "blockNumber": block, "status": status}
    if gas_used is not None:
        raw["gasUsed"] = gas_used
    if price is not None:
        raw["effectiveGasPrice"] = price
    return raw


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class RecordingSleep:
    """Async sleep stand-in that records delays and advances an optional clock."""

    def __init__(self, clock: Optional[FakeClock] = None):
        self.calls: List[float] = []
        self.clock = clock

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)
        if self.clock is not None:
            self.clock.now += delay


class FakeEndpoint:
    """
    Scripted RPC endpoint.

    `receipts` maps tx hash -> sequence of responses (dict, None or an
    exception instance); each call consumes one, the last one repeats.
    `heads` works the same way for block_number().
    """

    def __init__(self, name: str = "fake", receipts: Optional[Dict[str, list]] = None,
                 heads: Optional[list] = None, balances: Optional[Dict[str, int]] = None):
        self.name = name
        self._receipts = {h: list(seq) for h, seq in (receipts or {}).items()}
        self._heads = list(heads or [0])
        self.balances = balances or {}
        self.receipt_calls: Dict[str, int] = defaultdict(int)
        self.head_calls = 0

    @staticmethod
    def _next(seq: list):
        value = seq.pop(0) if len(seq) > 1 else seq[0]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_receipt(self, tx_hash: str):
        self.receipt_calls[tx_hash] += 1
        return self._next(self._receipts.setdefault(tx_hash, [None]))

    async def block_number(self) -> int:
        self.head_calls += 1
        return self._next(self._heads)

    async def balance(self, address: str) -> int:
        return self.balances.get(address, 0)

    @property
    def total_calls(self) -> int:
        return sum(self.receipt_calls.values()) + self.head_calls


class FakeSubmitter:
    """Scripted submitter: wallet index -> sequence of tx hashes or exceptions."""

    def __init__(self, script: Optional[Dict[int, list]] = None,
                 weth: Optional[Dict[str, int]] = None):
        self.script = {w: list(seq) for w, seq in (script or {}).items()}
        self.weth = weth or {}
        self.calls: List[Operation] = []

    async def submit(self, op: Operation) -> str:
        self.calls.append(op)
        seq = self.script.get(op.wallet_index, ["0x" + f"{op.wallet_index:064x}"])
        value = seq.pop(0) if len(seq) > 1 else seq[0]
        if isinstance(value, Exception):
            raise value
        return value

    async def weth_balance(self, address: str) -> int:
        return self.weth.get(address, 0)

    def attempts(self, wallet_index: int) -> int:
        return sum(1 for op in self.calls if op.wallet_index == wallet_index)


@pytest.fixture
def sample_tx_hash():
    return "0x" + "a" * 64


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep(clock):
    return RecordingSleep(clock)
