# taiko_auto/orchestrator.py
import asyncio
from typing import Dict, List
from .config import (
    PRIVATE_KEYS, MODE, ITERATIONS, SLEEP_BETWEEN,
    REQUIRED_CONFIRMATIONS, MAX_RETRIES, RETRY_DELAY, RECEIPT_ATTEMPTS,
    RECEIPT_DELAY, POLL_INTERVAL, CONFIRM_DEADLINE, ROTATION_POLICY, ROTATION_WINDOW
)
from .chain import connect_authority, checker_endpoints
from .confirmations import ConfirmationTracker
from .contracts import ContractSubmitter, GasSettings
from .errors import ConfigError, TaikoAutoError
from .executor import SubmissionExecutor
from .fees import FeeLedger
from .rotator import EndpointRotator
from .strategy import Runtime, run_vote_iteration, run_weth_iteration
from .util import fmt_eth, get_logger, log_with_border, make_account, on_error, sleep_with_jitter, wallet_label

log = get_logger()

FLOWS = {
    "weth": run_weth_iteration,
    "vote": run_vote_iteration,
}

def _load_accounts(keys: List[str]) -> Dict[int, object]:
    if not keys:
        raise ConfigError("PRIVATE_KEYS is empty")
    return {i: make_account(pk) for i, pk in enumerate(keys)}

async def build_runtime(keys: List[str] = PRIVATE_KEYS) -> Runtime:
    accounts = _load_accounts(keys)
    log.info(f"[config] PRIVATE_KEYS loaded: {len(accounts)}")
    authority = await connect_authority()
    rotator = EndpointRotator(checker_endpoints(), policy=ROTATION_POLICY, window=ROTATION_WINDOW)
    tracker = ConfirmationTracker(
        rotator, authority,
        fetch_attempts=RECEIPT_ATTEMPTS,
        authority_attempts=RECEIPT_ATTEMPTS,
        fetch_delay=RECEIPT_DELAY,
        poll_interval=POLL_INTERVAL,
    )
    ledger = FeeLedger()
    submitter = ContractSubmitter(authority, accounts, GasSettings.from_config())
    executor = SubmissionExecutor(
        submitter, tracker, ledger,
        max_retries=MAX_RETRIES,
        retry_delay=RETRY_DELAY,
        required_confirmations=REQUIRED_CONFIRMATIONS,
        confirm_deadline=CONFIRM_DEADLINE or None,
    )
    return Runtime(authority=authority, submitter=submitter, executor=executor,
                   ledger=ledger, accounts=accounts)

def report(rt: Runtime) -> None:
    lines = ["run summary"]
    for i in sorted(rt.accounts):
        line = f"{wallet_label(i)} fees={fmt_eth(rt.ledger.get(i))} ETH"
        history = rt.scores.history(i)
        if history:
            earned = sum(s.points_earned for s in history)
            line += f" points+={earned:.2f} rank={history[-1].rank}"
        lines.append(line)
    lines.append(f"total fees={fmt_eth(rt.ledger.total())} ETH")
    log_with_border(log, "\n".join(lines))

async def run(iterations: int = ITERATIONS, mode: str = MODE, rt: Runtime = None) -> Runtime:
    flow = FLOWS.get(mode)
    if flow is None:
        raise ConfigError(f"unknown MODE {mode!r}, expected one of {sorted(FLOWS)}")
    rt = rt or await build_runtime()
    for it in range(iterations):
        try:
            for batch in await flow(rt, it):
                if batch.failures:
                    log.warning(f"{batch.description}: {len(batch.failures)} of "
                                f"{len(batch.failures) + len(batch.submitted)} wallet(s) failed to submit")
        except TaikoAutoError as e:
            on_error(log, f"iteration {it + 1} failed", e)
        if it < iterations - 1:
            await sleep_with_jitter(log, *SLEEP_BETWEEN, reason="between iterations")
    report(rt)
    return rt

def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        log.info("interrupted, exiting")
    except ConfigError as e:
        on_error(log, "configuration error", e)
        raise SystemExit(2)

if __name__ == "__main__":
    main()
