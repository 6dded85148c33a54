"""Tests for the WETH and vote wallet flows in taiko_auto.strategy."""
from __future__ import annotations

from types import SimpleNamespace

from conftest import FakeEndpoint, FakeSubmitter, RecordingSleep, make_receipt
from taiko_auto.confirmations import ConfirmationTracker
from taiko_auto.executor import SubmissionExecutor
from taiko_auto.fees import FeeLedger
from taiko_auto.operations import Deposit, Vote, Withdraw
from taiko_auto.points import Score
from taiko_auto.rotator import EndpointRotator
from taiko_auto.strategy import Runtime, WalletInfo, record_scores, run_vote_iteration, run_weth_iteration

ETH = 10**18
ADDRS = ["0x" + f"{i + 1:040x}" for i in range(3)]


def default_hash(i: int) -> str:
    return "0x" + f"{i:064x}"


class FlakyBalanceEndpoint(FakeEndpoint):
    async def balance(self, address):
        value = self.balances.get(address, 0)
        if isinstance(value, Exception):
            raise value
        return value


def make_runtime(n_wallets, balances, weth=None, scores=None, votes=1):
    receipts = {default_hash(i): [make_receipt(default_hash(i))] for i in range(n_wallets)}
    checker = FakeEndpoint(receipts=receipts, heads=[500])
    authority = FlakyBalanceEndpoint(receipts=receipts, balances=balances)
    tracker = ConfirmationTracker(
        EndpointRotator([checker], policy="round_robin"), authority,
        fetch_attempts=1, authority_attempts=1, sleep=RecordingSleep(),
    )
    submitter = FakeSubmitter(weth=weth or {})
    ledger = FeeLedger()
    executor = SubmissionExecutor(submitter, tracker, ledger, required_confirmations=1,
                                  sleep=RecordingSleep())
    scores = {a: list(s) for a, s in (scores or {}).items()}

    def lookup(address):
        seq = scores.get(address)
        if not seq:
            return None
        return seq.pop(0) if len(seq) > 1 else seq[0]

    rt = Runtime(
        authority=authority, submitter=submitter, executor=executor, ledger=ledger,
        accounts={i: SimpleNamespace(address=ADDRS[i]) for i in range(n_wallets)},
        score_lookup=lookup, deposit_range=(0.5, 0.5), weth_interval=10,
        votes_per_iteration=votes, sleep=RecordingSleep(),
    )
    return rt, submitter


class TestWethIteration:
    async def test_deposit_then_withdraw(self):
        rt, submitter = make_runtime(
            2,
            balances={ADDRS[0]: 1 * ETH, ADDRS[1]: ETH // 10},
            weth={ADDRS[0]: ETH // 2},
        )

        reports = await run_weth_iteration(rt, 0)

        assert [r.description for r in reports] == ["Deposit", "Withdraw"]
        assert submitter.calls == [Deposit(0, ETH // 2), Withdraw(0, ETH // 2)]
        assert rt.sleep.calls == [10]
        assert rt.ledger.get(0) == 2 * 210_000
        assert rt.ledger.get(1) == 0

    async def test_broken_wallet_is_skipped(self):
        rt, submitter = make_runtime(
            2,
            balances={ADDRS[0]: ConnectionError("rpc down"), ADDRS[1]: 2 * ETH},
            weth={ADDRS[0]: ETH, ADDRS[1]: ETH // 2},
        )

        await run_weth_iteration(rt, 0)

        assert {op.wallet_index for op in submitter.calls} == {1}

    async def test_scores_recorded(self):
        rt, _ = make_runtime(
            1,
            balances={ADDRS[0]: ETH},
            scores={ADDRS[0]: [Score(100, 20), Score(104, 18)]},
        )

        await run_weth_iteration(rt, 3)

        [sample] = rt.scores.history(0)
        assert sample.iteration == 3
        assert sample.points_earned == 4
        assert sample.rank_change == 2


class TestVoteIteration:
    async def test_one_vote_per_wallet_per_round(self):
        rt, submitter = make_runtime(3, balances={a: ETH for a in ADDRS}, votes=2)

        reports = await run_vote_iteration(rt, 0)

        assert len(reports) == 2
        assert all(r.ok for r in reports)
        assert submitter.calls.count(Vote(0)) == 2
        assert len(submitter.calls) == 6
        assert rt.ledger.get(2) == 2 * 210_000


class TestRecordScores:
    async def test_lookup_error_skips_only_that_wallet(self):
        rt, _ = make_runtime(2, balances={})

        def lookup(address):
            if address == ADDRS[0]:
                raise TypeError("float() argument must be a string or a real number, not 'dict'")
            return Score(15, 4)

        rt.score_lookup = lookup
        wallets = [WalletInfo(0, ADDRS[0], ETH, None), WalletInfo(1, ADDRS[1], ETH, Score(10, 5))]

        await record_scores(rt, wallets, 0)

        assert rt.scores.history(0) == []
        [sample] = rt.scores.history(1)
        assert sample.points_earned == 5
        assert sample.rank_change == 1
