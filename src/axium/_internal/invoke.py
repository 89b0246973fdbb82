"""Call sync or async callables uniformly.

Controller actions and middleware guards can be ``def`` or ``async def``.
Everything that calls user code goes through ``invoke`` so the
awaitable check lives in one place::

    result = await invoke(action, *params, body)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
