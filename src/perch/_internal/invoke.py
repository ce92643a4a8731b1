"""Call user code that may be a plain function or a coroutine function."""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func*; await the result when it is awaitable.

    Compilers go through here so either kind can be registered.
    """
    result = func(*args, **kwargs)
    return await result if inspect.isawaitable(result) else result
