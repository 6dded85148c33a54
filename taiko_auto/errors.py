# taiko_auto/errors.py
from typing import Dict, List, Optional, Sequence

from .util import wallet_label


class TaikoAutoError(Exception):
    """Base error for the bot."""


class ConfigError(TaikoAutoError, ValueError):
    """Raised at startup when configuration is missing or invalid."""


class SubmissionError(TaikoAutoError):
    """A wallet's operation failed on every attempt."""

    def __init__(self, wallet_index: int, attempts: int, message: str):
        self.wallet_index = wallet_index
        self.attempts = attempts
        self.message = message
        super().__init__(
            f"{wallet_label(wallet_index)}: failed after {attempts} attempts: {message}"
        )


class BatchError(TaikoAutoError):
    def __init__(self, failures: Sequence[SubmissionError], description: str = ""):
        self.failures: List[SubmissionError] = list(failures)
        label = f"{description} " if description else ""
        wallets = ", ".join(wallet_label(f.wallet_index) for f in self.failures)
        super().__init__(f"{label}batch failed for {len(self.failures)} wallet(s): {wallets}")


class ConfirmationTimeout(TaikoAutoError):
    """Deadline passed with transactions still unconfirmed."""

    def __init__(self, pending, confirmed, deadline: float, depths: Optional[Dict[str, int]] = None):
        self.pending = list(pending)
        self.confirmed = list(confirmed)
        self.deadline = deadline
        # tx hash -> highest confirmation depth seen
        self.depths: Dict[str, int] = dict(depths or {})
        # set by SubmissionExecutor for the batch being confirmed
        self.report = None
        super().__init__(
            f"{len(self.pending)} transaction(s) still pending after {deadline:g}s"
        )
