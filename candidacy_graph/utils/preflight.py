"""Shared preflight and store connectivity utilities.

Provides a lightweight presence check for the ArangoDB settings (safe at
startup) and a bounded exponential-backoff connectivity check used by the
warm-up operation and the `python -m candidacy_graph` entry point.
"""
from typing import Callable, List, Tuple, TypeVar
import logging
import os
import time

from candidacy_graph.errors import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

REQUIRED_SETTINGS = ("ARANGO_HOST", "ARANGO_USER", "ARANGO_PASSWORD")


def check_settings_presence() -> Tuple[bool, List[str]]:
    """Check presence of required ArangoDB settings.

    Returns (ok, errors).
    """
    errors: List[str] = []
    for name in REQUIRED_SETTINGS:
        if os.getenv(name) is None:
            errors.append(f"{name} missing")
    if not os.getenv("ARANGO_DB"):
        logger.warning("[preflight] ARANGO_DB not set; using the default database name.")

    return (len(errors) == 0, errors)


def call_with_retries(
    func: Callable[[], T],
    *,
    retries: int = 3,
    backoff_factor: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call `func`, retrying StoreUnavailable with exponential backoff.

    Anything else propagates on the first failure. After `retries` attempts the
    last StoreUnavailable is re-raised.
    """
    for attempt in range(1, retries + 1):
        try:
            return func()
        except StoreUnavailable as exc:
            if attempt == retries:
                raise
            wait = backoff_factor * (2 ** (attempt - 1))
            logger.warning(f"[preflight] Store unavailable (attempt {attempt}/{retries}): {exc}. Retrying in {wait}s...")
            sleep(wait)
    raise StoreUnavailable("No attempts made")


def wait_for_store(
    ping: Callable[[], bool],
    *,
    attempts: int = 5,
    backoff_factor: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Return True once `ping` succeeds, False when the attempt budget runs out."""
    try:
        return bool(call_with_retries(ping, retries=attempts, backoff_factor=backoff_factor, sleep=sleep))
    except StoreUnavailable as exc:
        logger.error(f"[preflight] Store still unavailable after {attempts} attempts: {exc}")
        return False
