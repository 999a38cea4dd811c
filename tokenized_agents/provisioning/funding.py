"""
funding.py — Wait for the operator to fund the agent wallet.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .config import MIN_BALANCE_WEI

log = logging.getLogger("spawn.funding")

WEI_PER_ETH = 10**18


@dataclass(frozen=True)
class FundingPolicy:
    """Polling budget. Defaults give ~10 minutes of waiting."""

    threshold_wei: int = MIN_BALANCE_WEI
    max_attempts: int = 120
    interval: float = 5.0
    progress_every: int = 12

    @property
    def max_wait_seconds(self) -> float:
        return self.max_attempts * self.interval


def format_eth(wei: int) -> str:
    whole, frac = divmod(int(wei), WEI_PER_ETH)
    frac_str = f"{frac:018d}".rstrip("0") or "0"
    return f"{whole}.{frac_str}"


def await_funding(
    get_balance: Callable[[str], int],
    address: str,
    policy: FundingPolicy = FundingPolicy(),
    sleep=time.sleep,
) -> bool:
    """Poll until balance >= threshold. Returns False once the budget is spent."""
    for attempt in range(policy.max_attempts):
        balance = get_balance(address)
        if balance >= policy.threshold_wei:
            log.info(f"  {format_eth(balance)} ETH — funded")
            return True
        if attempt > 0 and attempt % policy.progress_every == 0:
            log.info(f"  waiting... ({format_eth(balance)} ETH)")
        if attempt + 1 < policy.max_attempts:
            sleep(policy.interval)
    return False
