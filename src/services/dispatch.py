"""
Join-all-settled execution of named delivery tasks.

Every task runs on its own worker thread. The caller waits until all tasks
have either returned or raised; one task failing never cancels another.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict

from domain.models import DeliveryOutcome

logger = logging.getLogger(__name__)


def _describe(error: Exception) -> str:
    """Failure reason reported to callers (e.g., "MessageRejected: Email address is not verified.")."""
    response = getattr(error, 'response', None)
    if isinstance(response, dict):
        err = response.get('Error', {})
        code = err.get('Code')
        message = err.get('Message')
        if code and message:
            return f"{code}: {message}"
    return str(error) or type(error).__name__


def settle_all(tasks: Dict[str, Callable[[], str]]) -> Dict[str, DeliveryOutcome]:
    """
    Run delivery tasks concurrently and wait for every one to settle.

    Args:
        tasks: Callables keyed by delivery name; each returns a message id

    Returns:
        Dict of DeliveryOutcome keyed by delivery name

    Example:
        >>> outcomes = settle_all({
        ...     'thank-you': lambda: sender.send(thank_you),
        ...     'notification': lambda: sender.send(notification),
        ... })
        >>> outcomes['notification'].delivered
        True
    """
    if not tasks:
        return {}

    with ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix='delivery') as executor:
        futures = {name: executor.submit(task) for name, task in tasks.items()}
        wait(futures.values())

    outcomes = {}
    for name, future in futures.items():
        error = future.exception()
        if error is None:
            outcomes[name] = DeliveryOutcome(name=name, delivered=True, message_id=future.result())
        else:
            logger.debug(f"Delivery {name} raised", exc_info=error)
            outcomes[name] = DeliveryOutcome(name=name, delivered=False, error=_describe(error))
    return outcomes
