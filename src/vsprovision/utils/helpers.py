"""Helper utilities."""

import asyncio
import logging
from functools import wraps
from typing import Any, Callable

from rich.logging import RichHandler
from typer.core import TyperGroup

from .output import console


def async_to_sync(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to run async functions synchronously."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(func(*args, **kwargs))

    return wrapper


def ordered_group(order: list[str]) -> type[TyperGroup]:
    """Create a TyperGroup subclass that orders commands."""

    class _OrderedGroup(TyperGroup):
        def list_commands(self, ctx: Any) -> list[str]:
            commands = super().list_commands(ctx)
            rank = {n: i for i, n in enumerate(order)}
            return sorted(commands, key=lambda n: rank.get(n, 99))

    return _OrderedGroup


def setup_logging(verbose: bool = False) -> None:
    """Route package logs through Rich.

    Args:
        verbose: Show DEBUG records (requests, task polling) instead of WARNING and up
    """
    logger = logging.getLogger("vsprovision")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=True))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
