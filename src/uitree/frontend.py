"""
Frontend function compiler.

Dependencies may carry an author-supplied expression (``js``) that runs on the
client before or instead of the backend function. The expression is Python
source evaluating to a callable, for example ``lambda x, y: x + y``. It is
evaluated with the ordinary builtins in scope and no sandbox.
"""

import builtins
import inspect
from typing import Any

from .core import get_logger, CompileError
from .models import FrontendFn

logger = get_logger(__name__)

_FILENAME = "<frontend_fn>"


def process_frontend_fn(
    source: str | None,
    backend_fn: bool,
    input_length: int,
    output_length: int,
) -> FrontendFn | None:
    """
    Compile expression source into an async callable.

    Args:
        source: Expression source, or None/empty for no frontend function
        backend_fn: Whether a backend function also runs
        input_length: Number of dependency inputs
        output_length: Number of dependency outputs

    Returns:
        Coroutine function taking the argument list, or None if the source
        is missing or cannot be compiled
    """
    if not source:
        return None

    wrap = input_length == 1 if backend_fn else output_length == 1

    try:
        code = _compile_expression(source)
    except CompileError as e:
        logger.error("frontend_fn_compile_failed", error=str(e.__cause__), source=source[:80])
        return None

    async def frontend_fn(args: list[Any]) -> Any:
        fn = eval(code, {"__builtins__": builtins})
        result = fn(*args)
        if inspect.isawaitable(result):
            result = await result
        if wrap and not isinstance(result, list):
            return [result]
        return result

    return frontend_fn


def _compile_expression(source: str):
    try:
        return compile(f"({source}\n)", _FILENAME, "eval")
    except (SyntaxError, ValueError) as e:
        raise CompileError("Could not parse custom frontend function", source=source) from e


__all__ = ["process_frontend_fn"]
