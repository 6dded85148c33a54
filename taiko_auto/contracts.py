# taiko_auto/contracts.py
from dataclasses import dataclass
from typing import Dict
from web3 import Web3
from web3.types import TxParams
from .config import WETH_ADDRESS, VOTE_ADDRESS, GAS_PRICE_GWEI, WETH_GAS_LIMIT, VOTE_GAS_LIMIT
from .errors import ConfigError
from .operations import Deposit, Operation, Vote, Withdraw
from .util import weth_abi, vote_abi, gwei_to_wei


@dataclass(frozen=True)
class GasSettings:
    gas_price_wei: int
    weth_gas_limit: int
    vote_gas_limit: int

    @classmethod
    def from_config(cls) -> "GasSettings":
        return cls(
            gas_price_wei=gwei_to_wei(GAS_PRICE_GWEI),
            weth_gas_limit=WETH_GAS_LIMIT,
            vote_gas_limit=VOTE_GAS_LIMIT,
        )


class ContractSubmitter:
    """Turns an Operation into a signed contract call on the authoritative RPC."""

    def __init__(self, endpoint, accounts: Dict[int, object], gas: GasSettings,
                 weth_address: str = WETH_ADDRESS, vote_address: str = VOTE_ADDRESS):
        self.w3 = endpoint.w3
        self.accounts = accounts
        self.gas = gas
        self.weth = self.w3.eth.contract(address=Web3.to_checksum_address(weth_address), abi=weth_abi())
        self.vote = (
            self.w3.eth.contract(address=Web3.to_checksum_address(vote_address), abi=vote_abi())
            if vote_address else None
        )

    async def _tx_base(self, from_addr: str, gas_limit: int, value: int = 0) -> TxParams:
        return {
            "from": from_addr,
            "nonce": await self.w3.eth.get_transaction_count(from_addr, "pending"),
            "gasPrice": self.gas.gas_price_wei,
            "gas": gas_limit,
            "value": value,
        }

    async def submit(self, op: Operation) -> str:
        acct = self.accounts.get(op.wallet_index)
        if acct is None:
            raise KeyError(f"no account for wallet index {op.wallet_index}")

        if isinstance(op, Deposit):
            fn = self.weth.functions.deposit()
            base = await self._tx_base(acct.address, self.gas.weth_gas_limit, op.amount_wei)
        elif isinstance(op, Withdraw):
            fn = self.weth.functions.withdraw(int(op.amount_wei))
            base = await self._tx_base(acct.address, self.gas.weth_gas_limit)
        elif isinstance(op, Vote):
            if self.vote is None:
                raise ConfigError("VOTE_ADDRESS required for vote operations")
            fn = self.vote.functions.vote()
            base = await self._tx_base(acct.address, self.gas.vote_gas_limit)
        else:
            raise TypeError(f"unsupported operation {op!r}")

        tx_data = await fn.build_transaction(base)
        signed = acct.sign_transaction(tx_data)
        txh = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(txh)

    async def weth_balance(self, address: str) -> int:
        return await self.weth.functions.balanceOf(address).call()
