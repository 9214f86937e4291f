"""Commit-message prompt factories for Quartz Publisher.

A prompt receives the default commit message and resolves to the message
the user submitted, or None when the user cancelled.
"""

from typing import Awaitable, Callable, Optional

import click

MessagePrompt = Callable[[str], Awaitable[Optional[str]]]


def fixed(message: str) -> MessagePrompt:
    """Create a prompt that always submits the given message.

    Args:
        message: Message to submit, may be empty

    Returns:
        A prompt function (default) -> message
    """
    async def prompt(default: str) -> Optional[str]:
        return message
    return prompt


def accept_default() -> MessagePrompt:
    """Create a prompt that submits the default message unchanged."""
    async def prompt(default: str) -> Optional[str]:
        return default
    return prompt


def cancelled() -> MessagePrompt:
    """Create a prompt that is always dismissed."""
    async def prompt(default: str) -> Optional[str]:
        return None
    return prompt


def console(title: str = "Commit message") -> MessagePrompt:
    """Create a prompt that asks on the terminal.

    The question is asked on the event loop's own thread, so the loop
    waits while the user types. Ctrl-C or end of input cancels.

    Args:
        title: Text shown before the input field

    Returns:
        A prompt function (default) -> message or None
    """
    def ask(default: str) -> Optional[str]:
        try:
            return click.prompt(title, default=default, show_default=True)
        except click.Abort:
            return None

    async def prompt(default: str) -> Optional[str]:
        return ask(default)
    return prompt
