"""Operator prompt exports."""

from .operator_input import (
    CONFIRMATION_LITERAL,
    ClickPrompter,
    Prompter,
    choose_index,
    confirm_literal,
)

__all__ = [
    "CONFIRMATION_LITERAL",
    "ClickPrompter",
    "Prompter",
    "choose_index",
    "confirm_literal",
]
