"""Bounded-time calls to outbound collaborators (gateway, email, realtime)"""
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

logger = logging.getLogger(__name__)

# Shared pool so a hung call never blocks the request thread past its timeout
_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix='outbound')


class OutboundTimeout(Exception):
    """Raised when an outbound call does not finish within its timeout"""
    pass


def bounded_call(func, *args, timeout=None, **kwargs):
    """
    Run func(*args, **kwargs) and wait at most `timeout` seconds for its result.

    Exceptions raised by func propagate unchanged. A missing timeout runs the
    call inline.

    Raises:
        OutboundTimeout: If the call is still running when the timeout expires
    """
    if not timeout:
        return func(*args, **kwargs)
    future = _executor.submit(func, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        future.cancel()
        raise OutboundTimeout(f'{getattr(func, "__name__", func)} timed out after {timeout}s')


def best_effort(label, func, *args, timeout=None, **kwargs):
    """
    Fire-and-forget wrapper for secondary side effects.

    Any failure, timeout included, is logged and swallowed so it can never
    change the outcome of the primary operation. Returns True on success.
    """
    try:
        bounded_call(func, *args, timeout=timeout, **kwargs)
        return True
    except Exception as e:
        logger.warning(f'[SIDE-EFFECT] {label} failed: {e}')
        return False
