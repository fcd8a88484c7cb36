"""Utility functions and helpers."""

from .helpers import async_to_sync, ordered_group, setup_logging
from .output import (
    confirm,
    console,
    create_table,
    format_kb,
    print_cancelled,
    print_error,
    print_info,
    print_success,
    print_warning,
    prompt,
)

__all__ = [
    "async_to_sync",
    "confirm",
    "console",
    "create_table",
    "format_kb",
    "ordered_group",
    "print_cancelled",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "prompt",
    "setup_logging",
]
