# taiko_auto/receipts.py
"""Receipt model and the bounded-retry receipt fetcher."""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional

from web3 import Web3

from .util import get_logger, short

log = get_logger()

Sleep = Callable[[float], Awaitable[Any]]


class Outcome(str, Enum):
    OK = "ok"
    PENDING = "pending"


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    block_number: int
    gas_used: Optional[int]
    effective_gas_price: Optional[int]
    status: Optional[int]

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]], tx_hash: str = "") -> Optional["Receipt"]:
        """Build from a JSON-RPC receipt; None while it has no block number."""
        if not raw:
            return None
        block = raw.get("blockNumber")
        if block is None:
            return None
        return cls(
            tx_hash=_hex(raw.get("transactionHash")) or tx_hash,
            block_number=_opt_int(block),
            gas_used=_opt_int(raw.get("gasUsed")),
            effective_gas_price=_opt_int(raw.get("effectiveGasPrice")),
            status=_opt_int(raw.get("status")),
        )

    @property
    def is_well_formed(self) -> bool:
        return self.gas_used is not None and self.effective_gas_price is not None

    @property
    def succeeded(self) -> bool:
        # pre-byzantium receipts carry no status; treat as success
        return self.status is None or self.status == 1

    @property
    def fee(self) -> int:
        if not self.is_well_formed:
            raise ValueError(f"receipt {self.tx_hash} has no fee fields")
        return self.gas_used * self.effective_gas_price


@dataclass(frozen=True)
class FetchResult:
    outcome: Outcome
    receipt: Optional[Receipt] = None
    attempts: int = 0
    last_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


def _hex(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, str):
        return v
    return Web3.to_hex(v)

def _opt_int(v: Any) -> Optional[int]:
    if v is None:
        return None
    if isinstance(v, str):
        return int(v, 16) if v.startswith("0x") else int(v)
    return int(v)


async def fetch_receipt(
    endpoint,
    tx_hash: str,
    max_attempts: int = 3,
    delay: float = 2.0,
    sleep: Sleep = asyncio.sleep,
) -> FetchResult:
    """
    Try up to `max_attempts` times to get a mined receipt from `endpoint`.

    Transport errors count as failed attempts and are logged, never raised.
    Running out of attempts yields Outcome.PENDING: a fresh transaction
    simply is not mined yet.
    """
    last_error = None
    for attempt in range(1, max_attempts + 1):
        try:
            receipt = Receipt.from_raw(await endpoint.get_receipt(tx_hash), tx_hash)
            if receipt is not None:
                return FetchResult(Outcome.OK, receipt, attempt)
        except Exception as e:
            last_error = str(e)
            log.warning(f"receipt fetch attempt {attempt}/{max_attempts} failed "
                        f"tx={short(tx_hash)} rpc={getattr(endpoint, 'name', endpoint)}: {e}")
        if attempt < max_attempts:
            await sleep(delay)
    return FetchResult(Outcome.PENDING, None, max_attempts, last_error)
