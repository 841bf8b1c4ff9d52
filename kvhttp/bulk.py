"""Fan-out helpers behind ``get_all``, ``set_all`` and ``delete_all``."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Iterable, Sequence, TypeVar

from .errors import InvalidArgument

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _reap(task: asyncio.Task) -> None:
    # Marks the exception retrieved; siblings may fail after gather raised.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Bulk operation step failed: %r", exc)


async def fan_out(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Run awaitables concurrently and return their results in order.

    The first failure is raised as soon as it happens. The remaining
    tasks are not cancelled: they run to completion in the background
    and their results (or errors) are discarded.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    for task in tasks:
        task.add_done_callback(_reap)
    if not tasks:
        return []
    return list(await asyncio.gather(*tasks))


def _arity(fn: Callable[..., Any]) -> int | None:
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return None
    if any(p.kind is p.VAR_POSITIONAL for p in params):
        return None
    return sum(
        1
        for p in params
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    )


def resolve_values(keys: Sequence[str], values: Any) -> list[Any]:
    """One value per key for ``set_all``.

    ``values`` may be:

    - a callable, called as ``values(key, index, keys)`` (callables
      taking fewer positional arguments get the leading ones only);
    - a list or tuple, matched to the keys by position;
    - anything else, broadcast to every key.

    Raises:
        InvalidArgument: A list or tuple whose length differs from the
            number of keys.
    """
    if callable(values):
        arity = _arity(values)
        keys = list(keys)
        out = []
        for index, key in enumerate(keys):
            args = (key, index, keys)
            out.append(values(*(args if arity is None else args[:arity])))
        return out
    if isinstance(values, (list, tuple)):
        if len(values) != len(keys):
            raise InvalidArgument(
                f"Got {len(values)} values for {len(keys)} keys"
            )
        return list(values)
    return [values] * len(keys)
