from __future__ import annotations

import logging

from sprout_ui.data.api_client import ApiError

logger = logging.getLogger(__name__)


def guarded_load(ctx, key, fetch, default=None):
    """Fetch through the context's guard and cache.

    Errors are logged and turn into ``default``; the loading flag is always
    cleared. A result that lost the race to a newer fetch or a live snapshot
    is dropped and the cached value returned instead.
    """
    guard = ctx.fetch_guard
    cache = ctx.cache
    token = guard.begin(key)
    ctx.session.set_loading(True)
    try:
        result = fetch()
    except ApiError as exc:
        logger.error("Failed to load %s: %s", key, exc)
        result = default
    finally:
        ctx.session.set_loading(False)
    if guard.apply(key, token, cache.put, key, result):
        return result
    logger.debug("Discarded superseded result for %s", key)
    return cache.get(key, default)


def run_action(action, *args, **kwargs):
    """Run a write and return ``(result, error_message)``."""
    try:
        return action(*args, **kwargs), None
    except ApiError as exc:
        logger.error("Action %s failed: %s", getattr(action, "__name__", action), exc)
        return None, exc.message
