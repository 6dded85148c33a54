# taiko_auto/operations.py
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Vote:
    wallet_index: int

    @property
    def name(self) -> str:
        return "Vote"


@dataclass(frozen=True)
class Deposit:
    wallet_index: int
    amount_wei: int

    @property
    def name(self) -> str:
        return "Deposit"


@dataclass(frozen=True)
class Withdraw:
    wallet_index: int
    amount_wei: int

    @property
    def name(self) -> str:
        return "Withdraw"


Operation = Union[Vote, Deposit, Withdraw]


@dataclass(frozen=True)
class TxRef:
    """A submitted transaction waiting for confirmation."""
    tx_hash: str
    wallet_index: int
