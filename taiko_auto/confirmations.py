# taiko_auto/confirmations.py
"""
Confirmation tracking across a rotating pool of read endpoints.

Depth is measured on whatever checker endpoint the rotator hands out; that
number is advisory. A transaction only leaves the tracked set once the
authoritative endpoint returns a receipt with fee fields for it.
"""
import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from .errors import ConfirmationTimeout
from .operations import TxRef
from .receipts import Receipt, Sleep, fetch_receipt
from .rotator import EndpointRotator
from .util import BORDER, get_logger, on_error, short, wallet_label

log = get_logger()


class TxState(str, Enum):
    PENDING = "pending"                  # no receipt on the checker yet
    CONFIRMING = "confirming"            # mined, below required depth
    ABOVE_THRESHOLD = "above_threshold"  # deep enough, authoritative receipt not validated
    CONFIRMED = "confirmed"


_ORDER = {TxState.PENDING: 0, TxState.CONFIRMING: 1, TxState.ABOVE_THRESHOLD: 2, TxState.CONFIRMED: 3}


@dataclass
class TrackedTx:
    ref: TxRef
    state: TxState = TxState.PENDING
    confirmations: int = 0  # highest depth observed so far
    status: str = "Pending"


@dataclass(frozen=True)
class ConfirmedTx:
    receipt: Receipt
    wallet_index: int


@dataclass(frozen=True)
class CheckResult:
    state: TxState
    status: str
    confirmations: Optional[int] = None
    receipt: Optional[Receipt] = None


class ConfirmationTracker:
    def __init__(
        self,
        rotator: EndpointRotator,
        authority,
        *,
        fetch_attempts: int = 3,
        authority_attempts: int = 3,
        fetch_delay: float = 2.0,
        poll_interval: float = 5.0,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.rotator = rotator
        self.authority = authority
        self.fetch_attempts = fetch_attempts
        self.authority_attempts = authority_attempts
        self.fetch_delay = fetch_delay
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock
        self.rounds = 0

    async def wait_for_all(
        self,
        transactions: Iterable[TxRef],
        required_confirmations: int,
        deadline: Optional[float] = None,
    ) -> List[ConfirmedTx]:
        """
        Poll until every transaction is confirmed to `required_confirmations`.

        Runs until done unless `deadline` (seconds) is given, in which case
        ConfirmationTimeout is raised once it passes with work left.
        """
        tracked: Dict[str, TrackedTx] = {}
        for ref in transactions:
            tracked.setdefault(ref.tx_hash, TrackedTx(ref))
        self.rounds = 0
        if not tracked:
            return []

        log.info(BORDER)
        log.info(f"waiting for {len(tracked)} transaction(s), {required_confirmations} confirmation(s) each")

        confirmed: List[ConfirmedTx] = []
        started = self._clock()
        while tracked:
            batch = list(tracked.values())
            results = await asyncio.gather(*(self._check(t, required_confirmations) for t in batch))
            self.rounds += 1

            status_line = []
            for t, res in zip(batch, results):
                self._record(t, res, required_confirmations)
                if res.state is TxState.CONFIRMED:
                    del tracked[t.ref.tx_hash]
                    confirmed.append(ConfirmedTx(res.receipt, t.ref.wallet_index))
                    log.info(f"{wallet_label(t.ref.wallet_index)} confirmed tx={short(t.ref.tx_hash)} "
                             f"block={res.receipt.block_number}")
                else:
                    status_line.append(f"[{wallet_label(t.ref.wallet_index)}: {t.status}]")
            if status_line:
                log.info(" ".join(status_line))

            if tracked:
                if deadline is not None and self._clock() - started >= deadline:
                    pending = list(tracked.values())
                    raise ConfirmationTimeout(
                        [t.ref for t in pending], confirmed, deadline,
                        depths={t.ref.tx_hash: t.confirmations for t in pending},
                    )
                await self._sleep(self.poll_interval)

        log.info(f"all transactions confirmed after {self.rounds} round(s)")
        log.info(BORDER)
        return confirmed

    @staticmethod
    def _record(t: TrackedTx, res: CheckResult, required: int) -> None:
        """Apply a round's result; a lagging endpoint never lowers state or depth."""
        if res.confirmations is not None:
            t.confirmations = max(t.confirmations, res.confirmations)
        if res.state is TxState.CONFIRMED or _ORDER[res.state] >= _ORDER[t.state]:
            t.state = res.state
            if res.confirmations is not None and res.confirmations < t.confirmations:
                t.status = f"{t.confirmations}/{required} blocks"
            else:
                t.status = res.status
        else:
            t.status = f"{res.status} (last {t.confirmations}/{required} blocks)"

    async def _check(self, t: TrackedTx, required: int) -> CheckResult:
        try:
            return await self._check_once(t, required)
        except Exception as e:
            on_error(log, f"confirmation check failed tx={short(t.ref.tx_hash)}", e)
            return CheckResult(t.state, t.status)

    async def _check_once(self, t: TrackedTx, required: int) -> CheckResult:
        tx_hash = t.ref.tx_hash
        endpoint = self.rotator.next()
        candidate = await fetch_receipt(endpoint, tx_hash, self.fetch_attempts,
                                        self.fetch_delay, self._sleep)
        if not candidate.ok:
            return CheckResult(TxState.PENDING, "Pending")

        try:
            head = await endpoint.block_number()
        except Exception as e:
            log.warning(f"block number unavailable rpc={getattr(endpoint, 'name', endpoint)}: {e}")
            return CheckResult(t.state, t.status)

        confirmations = max(head - candidate.receipt.block_number + 1, 0)
        progress = f"{confirmations}/{required} blocks"
        if confirmations < required:
            return CheckResult(TxState.CONFIRMING, progress, confirmations)

        final = await fetch_receipt(self.authority, tx_hash, self.authority_attempts,
                                    self.fetch_delay, self._sleep)
        if final.ok and final.receipt.is_well_formed:
            return CheckResult(TxState.CONFIRMED, progress, confirmations, final.receipt)

        log.warning(f"invalid receipt data from authoritative rpc tx={tx_hash}, retrying next round")
        return CheckResult(TxState.ABOVE_THRESHOLD, f"{progress}, validating", confirmations)
