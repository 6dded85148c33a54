# taiko_auto/strategy.py
import asyncio
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .config import (
    DEPOSIT_AMOUNT_MIN, DEPOSIT_AMOUNT_MAX, WETH_INTERVAL, VOTES_PER_ITERATION
)
from .executor import BatchReport, SubmissionExecutor
from .fees import FeeLedger
from .operations import Deposit, Vote, Withdraw
from .points import Score, ScoreBook, fetch_score
from .receipts import Sleep
from .util import fmt_eth, get_logger, log_with_border, on_error, random_amount_wei, short, wallet_label

log = get_logger()


@dataclass
class Runtime:
    authority: object
    submitter: object
    executor: SubmissionExecutor
    ledger: FeeLedger
    accounts: Dict[int, object]
    scores: ScoreBook = field(default_factory=ScoreBook)
    score_lookup: Callable[[str], Optional[Score]] = fetch_score
    deposit_range: Tuple[float, float] = (DEPOSIT_AMOUNT_MIN, DEPOSIT_AMOUNT_MAX)
    weth_interval: float = WETH_INTERVAL
    votes_per_iteration: int = VOTES_PER_ITERATION
    sleep: Sleep = asyncio.sleep


@dataclass
class WalletInfo:
    index: int
    address: str
    balance: int
    score: Optional[Score]


async def _load_wallet(rt: Runtime, index: int, acct) -> Optional[WalletInfo]:
    try:
        score = await asyncio.to_thread(rt.score_lookup, acct.address)
        balance = await rt.authority.balance(acct.address)
    except Exception as e:
        on_error(log, f"error initializing {wallet_label(index)}", e)
        return None

    msg = f"{wallet_label(index)} {short(acct.address)} balance={fmt_eth(balance)} ETH"
    if score:
        msg += f" points={score.total_points:.2f} rank={score.rank}"
    log.info(msg)
    return WalletInfo(index, acct.address, balance, score)

async def load_wallets(rt: Runtime) -> List[WalletInfo]:
    infos = await asyncio.gather(*(_load_wallet(rt, i, a) for i, a in sorted(rt.accounts.items())))
    return [w for w in infos if w is not None]

async def record_scores(rt: Runtime, wallets: List[WalletInfo], iteration: int) -> None:
    for w in wallets:
        try:
            after = await asyncio.to_thread(rt.score_lookup, w.address)
        except Exception as e:
            on_error(log, f"error reading points for {wallet_label(w.index)}", e)
            continue
        if after is None:
            continue
        s = rt.scores.record(w.index, iteration, w.score, after)
        log.info(f"{wallet_label(w.index)} points +{s.points_earned:.2f} "
                 f"total={s.total_points:.2f} rank={s.rank} ({s.rank_change:+d})")

def _deposit_ops(rt: Runtime, wallets: List[WalletInfo]) -> List[Deposit]:
    ops = []
    for w in wallets:
        amount = random_amount_wei(*rt.deposit_range)
        if w.balance < amount:
            log.warning(f"{wallet_label(w.index)}: insufficient balance for deposit "
                        f"({fmt_eth(w.balance)} < {fmt_eth(amount)} ETH)")
            continue
        log.info(f"{wallet_label(w.index)} deposit amount {fmt_eth(amount)} ETH")
        ops.append(Deposit(w.index, amount))
    return ops

async def _withdraw_op(rt: Runtime, w: WalletInfo) -> Optional[Withdraw]:
    try:
        weth = await rt.submitter.weth_balance(w.address)
    except Exception as e:
        on_error(log, f"error reading WETH balance for {wallet_label(w.index)}", e)
        return None
    log.info(f"{wallet_label(w.index)} WETH balance {fmt_eth(weth)}")
    if weth == 0:
        log.warning(f"{wallet_label(w.index)}: no WETH balance to withdraw")
        return None
    return Withdraw(w.index, weth)

async def run_weth_iteration(rt: Runtime, iteration: int) -> List[BatchReport]:
    log_with_border(log, f"starting WETH iteration {iteration + 1}")
    wallets = await load_wallets(rt)
    reports = []

    deposits = _deposit_ops(rt, wallets)
    if deposits:
        reports.append(await rt.executor.execute(deposits, "Deposit"))

    await rt.sleep(rt.weth_interval)

    withdraws = await asyncio.gather(*(_withdraw_op(rt, w) for w in wallets))
    withdraws = [op for op in withdraws if op is not None]
    if withdraws:
        reports.append(await rt.executor.execute(withdraws, "Withdraw"))

    await record_scores(rt, wallets, iteration)
    return reports

async def run_vote_iteration(rt: Runtime, iteration: int) -> List[BatchReport]:
    log_with_border(log, f"starting Vote iteration {iteration + 1}")
    wallets = await load_wallets(rt)
    reports = []
    for _ in range(rt.votes_per_iteration):
        votes = [Vote(w.index) for w in wallets]
        if not votes:
            break
        reports.append(await rt.executor.execute(votes, "Vote"))
    await record_scores(rt, wallets, iteration)
    return reports
