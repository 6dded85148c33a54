# taiko_auto/chain.py
from typing import List, Optional
from web3 import AsyncWeb3, AsyncHTTPProvider
from web3.exceptions import TransactionNotFound
from .config import TAIKO_RPC, CHECKER_RPCS, RPC_TIMEOUT
from .errors import ConfigError
from .util import short


class RpcEndpoint:
    """One JSON-RPC endpoint, used either as the authority or as a checker."""

    def __init__(self, url: str, timeout: int = RPC_TIMEOUT):
        if not url:
            raise ConfigError("RPC url is empty")
        self.url = url
        self.w3 = AsyncWeb3(AsyncHTTPProvider(url, request_kwargs={"timeout": timeout}))

    @property
    def name(self) -> str:
        return short(self.url.split("://")[-1], keep=12)

    def __repr__(self) -> str:
        return f"RpcEndpoint({self.url!r})"

    async def is_connected(self) -> bool:
        return await self.w3.is_connected()

    async def get_receipt(self, tx_hash: str) -> Optional[dict]:
        try:
            return await self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

    async def block_number(self) -> int:
        return await self.w3.eth.block_number

    async def balance(self, address: str) -> int:
        return await self.w3.eth.get_balance(address)


async def connect_authority(url: str = TAIKO_RPC) -> RpcEndpoint:
    if not url:
        raise ConfigError("TAIKO_RPC required (.env)")
    endpoint = RpcEndpoint(url)
    if not await endpoint.is_connected():
        raise ConfigError(f"RPC not connected: {url}")
    return endpoint


def checker_endpoints(urls: List[str] = CHECKER_RPCS) -> List[RpcEndpoint]:
    if not urls:
        raise ConfigError("CHECKER_RPCS is empty")
    return [RpcEndpoint(u) for u in urls]
