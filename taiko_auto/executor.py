# taiko_auto/executor.py
import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from .confirmations import ConfirmationTracker, ConfirmedTx
from .errors import BatchError, ConfirmationTimeout, SubmissionError
from .fees import FeeLedger
from .operations import Operation, TxRef
from .receipts import Sleep
from .util import fmt_eth, get_logger, on_error, short, wallet_label

log = get_logger()


@dataclass
class BatchReport:
    description: str = ""
    submitted: List[TxRef] = field(default_factory=list)
    confirmed: List[ConfirmedTx] = field(default_factory=list)
    failures: List[SubmissionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise BatchError(self.failures, self.description)


class SubmissionExecutor:
    """
    Submits a batch of operations, one retry loop per wallet, then waits for
    every submitted transaction to confirm and books its fee.
    """

    def __init__(
        self,
        submitter,
        tracker: ConfirmationTracker,
        ledger: FeeLedger,
        *,
        max_retries: int = 3,
        retry_delay: float = 5.0,
        required_confirmations: int = 2,
        confirm_deadline: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.submitter = submitter
        self.tracker = tracker
        self.ledger = ledger
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.required_confirmations = required_confirmations
        self.confirm_deadline = confirm_deadline
        self._sleep = sleep

    async def execute(self, operations: Sequence[Operation], description: str = "") -> BatchReport:
        description = description or (operations[0].name if operations else "batch")
        report = BatchReport(description=description)
        if not operations:
            return report

        log.info(f"executing {description} for {len(operations)} wallet(s)")
        outcomes = await asyncio.gather(*(self._submit(op, description) for op in operations))
        for out in outcomes:
            if isinstance(out, SubmissionError):
                report.failures.append(out)
            else:
                report.submitted.append(out)

        for failure in report.failures:
            log.error(str(failure))

        try:
            report.confirmed = await self.tracker.wait_for_all(
                report.submitted, self.required_confirmations, deadline=self.confirm_deadline
            )
        except ConfirmationTimeout as e:
            # book what confirmed before the deadline
            report.confirmed = list(e.confirmed)
            for c in report.confirmed:
                self._book_fee(c)
            e.report = report
            raise
        for c in report.confirmed:
            self._book_fee(c)
        return report

    async def _submit(self, op: Operation, description: str) -> Union[TxRef, SubmissionError]:
        label = wallet_label(op.wallet_index)
        last_error = ""
        for attempt in range(1, self.max_retries + 1):
            try:
                tx_hash = await self.submitter.submit(op)
                if not tx_hash:
                    raise RuntimeError("transaction failed - no hash returned")
                log.info(f"{label} {description} tx={tx_hash}")
                return TxRef(tx_hash, op.wallet_index)
            except Exception as e:
                last_error = str(e) or type(e).__name__
                log.warning(f"{label} attempt {attempt}/{self.max_retries} failed: {last_error}")
                if attempt < self.max_retries:
                    log.info(f"{label} waiting {self.retry_delay:g}s before retry")
                    await self._sleep(self.retry_delay)
        return SubmissionError(op.wallet_index, self.max_retries, last_error)

    def _book_fee(self, c: ConfirmedTx) -> None:
        label = wallet_label(c.wallet_index)
        receipt = c.receipt
        if receipt is None:
            log.error(f"{label}: transaction receipt is missing")
            return
        if not receipt.succeeded:
            log.error(f"{label}: transaction {short(receipt.tx_hash)} failed on-chain")
            return
        if not receipt.is_well_formed:
            log.error(f"{label}: receipt {short(receipt.tx_hash)} has no fee fields")
            return
        try:
            total = self.ledger.add(c.wallet_index, receipt.fee)
        except ValueError as e:
            on_error(log, f"{label}: fee not recorded", e)
            return
        log.info(f"{label} fee {fmt_eth(receipt.fee)} ETH (total {fmt_eth(total)} ETH)")
