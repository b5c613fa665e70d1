"""curl with bounded exponential backoff for transient network failures.

Only connection failures, timeouts and receive errors are retried; every
other curl exit code (HTTP errors under ``--fail``, bad arguments, ...) is
returned after the first attempt.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CURLE_COULDNT_CONNECT = 7
CURLE_OPERATION_TIMEDOUT = 28
CURLE_RECV_ERROR = 56

RETRYABLE_EXIT_CODES = frozenset({CURLE_COULDNT_CONNECT, CURLE_OPERATION_TIMEDOUT, CURLE_RECV_ERROR})


@dataclass
class CurlResult:
    exit_code: int
    stdout: bytes
    attempts: int


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Seconds to wait after failed ``attempt`` (1-based) before the next one."""
    return base_delay * 2 ** (attempt - 1)


def run_curl_with_retry(
    args: list[str],
    max_attempts: int = 3,
    base_delay: float = 1,
    runner=subprocess.run,
    sleep=time.sleep,
) -> CurlResult:
    """Run ``curl *args`` until it succeeds, fails permanently or attempts run out.

    Each attempt's stdout is captured separately so a partial body from a
    failed attempt never reaches the caller; only the last attempt's stdout is
    returned. curl's stderr is passed straight through.
    """
    attempt = 1
    exit_code = 0
    stdout = b""
    while attempt <= max_attempts:
        completed = runner(["curl", *args], stdout=subprocess.PIPE)
        exit_code, stdout = completed.returncode, completed.stdout or b""

        if exit_code == 0:
            return CurlResult(exit_code=0, stdout=stdout, attempts=attempt)
        if exit_code not in RETRYABLE_EXIT_CODES:
            return CurlResult(exit_code=exit_code, stdout=stdout, attempts=attempt)

        if attempt < max_attempts:
            delay = backoff_delay(attempt, base_delay)
            logger.warning(
                "curl failed (exit %d), retry %d/%d in %gs",
                exit_code,
                attempt,
                max_attempts,
                delay,
            )
            sleep(delay)
        attempt += 1

    logger.warning("curl failed after %d attempts (last exit code: %d)", max_attempts, exit_code)
    return CurlResult(exit_code=exit_code, stdout=stdout, attempts=max_attempts)
