# taiko_auto/util.py
import asyncio, random
from decimal import Decimal
from eth_account import Account

# --- pretty logging utils ---
import logging, sys
from .config import LOG_LEVEL, LOG_COLOR, LOG_JSON, DEBUG

RESET = "\x1b[0m"
COLORS = {
    "DEBUG":   "\x1b[38;5;245m",
    "INFO":    "\x1b[38;5;39m",
    "WARNING": "\x1b[38;5;214m",
    "ERROR":   "\x1b[38;5;203m",
}
BORDER = "-" * 100

def _short_level(level: str) -> str:
    return "warn" if level == "WARNING" else level.lower()

class _HumanFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        msg = record.getMessage()
        if LOG_COLOR:
            color = COLORS.get(level, "")
            return f"{color}{_short_level(level):>5}{RESET} {msg}"
        return f"{_short_level(level):>5} {msg}"

class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        import json, time
        payload = {
            "ts": round(time.time(), 3),
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "logger": record.name,
        }
        if DEBUG and record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

_log = None

def get_logger(name="taiko"):
    global _log
    return _log if _log else init_logging(name)

def init_logging(name="taiko"):
    global _log
    log = logging.getLogger(name)
    # accept WARN as an alias
    level = getattr(logging, "WARNING" if LOG_LEVEL == "WARN" else LOG_LEVEL, logging.INFO)
    log.setLevel(level)
    h = logging.StreamHandler(sys.stdout)
    h.setLevel(level)
    h.setFormatter(_JsonFormatter() if LOG_JSON else _HumanFormatter())
    # avoid duplicate handlers
    log.handlers[:] = [h]
    log.propagate = False
    _log = log
    return log

def log_with_border(log, msg: str, level: int = logging.INFO):
    log.log(level, BORDER)
    log.log(level, msg)
    log.log(level, BORDER)

def on_error(log, msg: str, exc: Exception = None):
    if DEBUG and exc:
        log.exception(msg)
    else:
        log.error(f"{msg}: {exc}" if exc else msg)

# --- pretty helpers ---
def short(x: object, keep: int = 6) -> str:
    if x is None:
        return "-"
    s = str(x)
    if s.startswith("0x") and len(s) > 2*keep+2:
        return f"{s[:2+keep]}…{s[-keep:]}"
    if len(s) > keep*2:
        return f"{s[:keep]}…{s[-keep:]}"
    return s

def wallet_label(index: int) -> str:
    return f"Wallet-{index + 1}"

def fmt_amount(raw_amount: int, decimals: int) -> str:
    if decimals <= 0:
        return str(raw_amount)
    q = 10 ** decimals
    whole = raw_amount // q
    frac = raw_amount % q
    if frac == 0:
        return f"{whole}"
    # trim trailing zeros, limit length
    s = f"{frac:0{decimals}d}".rstrip("0")
    s = s[:8]  # keep short
    return f"{whole}.{s}"

def fmt_eth(wei: int) -> str:
    return fmt_amount(int(wei), 18)

def eth_to_wei(amount_eth: float) -> int:
    return int(Decimal(str(amount_eth)) * 10**18)

def gwei_to_wei(amount_gwei: str) -> int:
    return int(Decimal(str(amount_gwei)) * 10**9)

def random_amount_wei(min_eth: float, max_eth: float) -> int:
    """Uniform amount in [min_eth, max_eth], rounded to 1e-6 ETH."""
    if max_eth <= min_eth:
        return eth_to_wei(min_eth)
    amount = round(random.uniform(min_eth, max_eth), 6)
    return eth_to_wei(amount)

def make_account(pk: str):
    return Account.from_key(pk)

async def sleep_with_jitter(log, min_s: int, max_s: int, reason: str = ""):
    """Sleep rand(min_s..max_s) seconds, logging the reason."""
    t = random.randint(min_s, max(max_s, min_s))
    if reason:
        log.info(f"sleep {t}s  ({reason})")
    else:
        log.info(f"sleep {t}s")
    await asyncio.sleep(t)

def weth_abi():
    # deposit, withdraw, balanceOf
    return [
        {"constant":False,"inputs":[],"name":"deposit","outputs":[],"payable":True,"stateMutability":"payable","type":"function"},
        {"constant":False,"inputs":[{"name":"wad","type":"uint256"}],"name":"withdraw","outputs":[],"payable":False,"stateMutability":"nonpayable","type":"function"},
        {"constant":True,"inputs":[{"name":"owner","type":"address"}],"name":"balanceOf","outputs":[{"name":"","type":"uint256"}],"type":"function"},
    ]

def vote_abi():
    return [
        {"inputs":[],"name":"vote","outputs":[],"stateMutability":"payable","type":"function"},
    ]
