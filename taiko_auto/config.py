# taiko_auto/config.py
import os
from typing import List, Tuple
from dotenv import load_dotenv

load_dotenv()

def _env(name: str, default: str = "") -> str:
    v = os.getenv(name, default).strip()
    return v

def _env_float(name: str, default: float) -> float:
    v = _env(name)
    return float(v) if v else float(default)

def _env_int(name: str, default: int) -> int:
    v = _env(name)
    return int(v) if v else int(default)

def _env_csv(name: str) -> List[str]:
    raw = _env(name)
    if not raw: return []
    parts = [p.strip() for p in raw.split(",")]
    return [p for p in parts if p]

# Authoritative endpoint: submits and validates final receipts
TAIKO_RPC = _env("TAIKO_RPC")
RPC_TIMEOUT = _env_int("RPC_TIMEOUT", 30)

# Read-only pool used only for confirmation-depth polling
CHECKER_RPCS: List[str] = _env_csv("CHECKER_RPCS") or ([TAIKO_RPC] if TAIKO_RPC else [])

PRIVATE_KEYS: List[str] = _env_csv("PRIVATE_KEYS")

# Contracts (Taiko mainnet WETH by default)
WETH_ADDRESS = _env("WETH_ADDRESS", "0xA51894664A773981C6C112C43ce576f315d5b1B6")
VOTE_ADDRESS = _env("VOTE_ADDRESS")

# Gas
GAS_PRICE_GWEI = _env("GAS_PRICE_GWEI", "0.1")
WETH_GAS_LIMIT = _env_int("WETH_GAS_LIMIT", 104_817)
VOTE_GAS_LIMIT = _env_int("VOTE_GAS_LIMIT", 50_000)

# Deposit amount range in ETH; equal bounds give a fixed amount
DEPOSIT_AMOUNT_MIN = _env_float("DEPOSIT_AMOUNT_MIN", 0.5)
DEPOSIT_AMOUNT_MAX = _env_float("DEPOSIT_AMOUNT_MAX", 0.5)

# Submission / confirmation engine
REQUIRED_CONFIRMATIONS = _env_int("REQUIRED_CONFIRMATIONS", 2)
MAX_RETRIES = _env_int("MAX_RETRIES", 3)
RETRY_DELAY = _env_float("RETRY_DELAY", 5.0)
RECEIPT_ATTEMPTS = _env_int("RECEIPT_ATTEMPTS", 3)
RECEIPT_DELAY = _env_float("RECEIPT_DELAY", 2.0)
POLL_INTERVAL = _env_float("POLL_INTERVAL", 5.0)
CONFIRM_DEADLINE = _env_float("CONFIRM_DEADLINE", 0.0)  # 0 = wait forever

# Endpoint rotation: "window" or "round_robin"
ROTATION_POLICY = _env("ROTATION_POLICY", "window").lower()
ROTATION_WINDOW = _env_float("ROTATION_WINDOW", 30.0)

# Run loop
MODE = _env("MODE", "weth").lower()
ITERATIONS = _env_int("ITERATIONS", 1)
VOTES_PER_ITERATION = _env_int("VOTES_PER_ITERATION", 1)
WETH_INTERVAL = _env_float("WETH_INTERVAL", 10.0)

SLEEP_BETWEEN: Tuple[int,int] = (
    _env_int("SLEEP_BETWEEN_MIN", 40),
    _env_int("SLEEP_BETWEEN_MAX", 120),
)

# Points service
POINTS_API_URL = _env("POINTS_API_URL")
POINTS_TIMEOUT = _env_int("POINTS_TIMEOUT", 15)

# ---- Logging flags ----
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()  # DEBUG/INFO/WARN/ERROR
LOG_COLOR = os.getenv("LOG_COLOR", "1") not in ("0","false","False")
LOG_JSON  = os.getenv("LOG_JSON", "0") in ("1","true","True")
DEBUG     = os.getenv("DEBUG", "0") in ("1","true","True")
