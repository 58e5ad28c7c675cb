"""Version banner shown before user-facing commands."""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from openwork import __version__
from openwork.utils import console

F = TypeVar("F", bound=Callable[..., Any])


def with_version(func: F) -> F:
    """Print the openwork version before running the wrapped command."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        console.print(f"[dim]openwork v{__version__}[/dim]")
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
