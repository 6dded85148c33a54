"""Tests for taiko_auto.orchestrator and formatting helpers."""
from __future__ import annotations

import pytest

from taiko_auto import orchestrator
from taiko_auto.errors import ConfigError
from taiko_auto.util import eth_to_wei, fmt_eth, gwei_to_wei, random_amount_wei, short, wallet_label

from test_strategy import ADDRS, ETH, make_runtime


class TestRun:
    async def test_vote_run_reports_fees(self):
        rt, submitter = make_runtime(2, balances={a: ETH for a in ADDRS})

        out = await orchestrator.run(iterations=1, mode="vote", rt=rt)

        assert out is rt
        assert len(submitter.calls) == 2
        assert rt.ledger.total() == 2 * 210_000

    async def test_unknown_mode(self):
        rt, _ = make_runtime(1, balances={})
        with pytest.raises(ConfigError):
            await orchestrator.run(iterations=1, mode="swap", rt=rt)

    def test_private_keys_required(self):
        with pytest.raises(ConfigError):
            orchestrator._load_accounts([])

    def test_accounts_indexed_in_order(self):
        keys = ["0x" + "11" * 32, "0x" + "22" * 32]
        accounts = orchestrator._load_accounts(keys)
        assert sorted(accounts) == [0, 1]
        assert accounts[0].address != accounts[1].address


class TestFormatting:
    def test_amounts(self):
        assert eth_to_wei(0.5) == ETH // 2
        assert gwei_to_wei("0.1") == 100_000_000
        assert fmt_eth(ETH + ETH // 4) == "1.25"
        assert fmt_eth(0) == "0"

    def test_random_amount_in_range(self):
        for _ in range(50):
            amount = random_amount_wei(0.1, 0.2)
            assert eth_to_wei(0.1) <= amount <= eth_to_wei(0.2)
        assert random_amount_wei(0.3, 0.3) == eth_to_wei(0.3)

    def test_labels(self):
        assert wallet_label(0) == "Wallet-1"
        assert short("0x" + "ab" * 32) == "0xababab…ababab"
        assert short(None) == "-"
