"""Interactive terminal prompts.

Input is read on a daemon thread so a prompt can time out without keeping
the process alive on a blocked ``input()``. A read that outlives its prompt
is handed to the next prompt instead of starting a second reader on stdin.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
import time
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


def is_interactive() -> bool:
    """Return True when stdin and stdout are attached to a terminal."""
    return sys.stdin.isatty() and sys.stdout.isatty()


class _StdinReader:
    """At most one ``input()`` call in flight, answered to the current waiter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._busy = False
        self._waiter: Optional[Callable[[Optional[str]], None]] = None

    def request(self, prompt: str, waiter: Callable[[Optional[str]], None]) -> None:
        with self._lock:
            self._waiter = waiter
            if self._busy:
                print(prompt, end="", flush=True)
                return
            self._busy = True
        threading.Thread(target=self._run, args=(prompt,), daemon=True).start()

    def cancel(self, waiter: Callable[[Optional[str]], None]) -> None:
        with self._lock:
            if self._waiter is waiter:
                self._waiter = None

    def _run(self, prompt: str) -> None:
        try:
            value: Optional[str] = input(prompt)
        except EOFError:
            value = None
        with self._lock:
            waiter, self._waiter, self._busy = self._waiter, None, False
        if waiter is None:
            logger.debug("Discarding late answer to %r", prompt)
            return
        waiter(value)


_stdin = _StdinReader()


async def read_line(prompt: str, timeout: Optional[float] = None) -> Optional[str]:
    """Print ``prompt`` and read one line from stdin.

    Returns:
        The line without its newline, or None on EOF or timeout.
    """
    loop = asyncio.get_running_loop()
    future: "asyncio.Future[Optional[str]]" = loop.create_future()

    def _settle(value: Optional[str]) -> None:
        if not future.done():
            future.set_result(value)

    def _waiter(value: Optional[str]) -> None:
        try:
            loop.call_soon_threadsafe(_settle, value)
        except RuntimeError:
            # The prompt timed out and its loop is closed.
            logger.debug("Discarding late answer to %r", prompt)

    _stdin.request(prompt, _waiter)
    try:
        return await asyncio.wait_for(future, timeout)
    except asyncio.TimeoutError:
        _stdin.cancel(_waiter)
        print()
        return None


async def ask_yes_no(question: str, timeout: Optional[float] = None) -> Optional[bool]:
    """Ask a yes/no question.

    ``timeout`` bounds the whole exchange, invalid answers included.

    Returns:
        True or False for an answer, None when nothing was answered in time.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        remaining = None if deadline is None else deadline - time.monotonic()
        if remaining is not None and remaining <= 0:
            return None
        answer = await read_line(f"{question} [y/n]: ", remaining)
        if answer is None:
            return None
        answer = answer.strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("Please answer 'y' or 'n'.")


def _print_options(options: Sequence[str]) -> None:
    for index, option in enumerate(options, start=1):
        print(f"  {index}) {option}")


async def select_one(prompt: str, options: Sequence[str]) -> Optional[int]:
    """Let the user pick one entry; returns its index, or None on EOF."""
    print(prompt)
    _print_options(options)
    while True:
        answer = await read_line("> ")
        if answer is None:
            return None
        answer = answer.strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return int(answer) - 1
        print(f"Enter a number between 1 and {len(options)}.")


async def select_many(prompt: str, options: Sequence[str]) -> List[int]:
    """Let the user pick entries by number (space or comma separated)."""
    print(prompt)
    _print_options(options)
    while True:
        answer = await read_line("> ")
        if answer is None:
            return []
        tokens = answer.replace(",", " ").split()
        if all(t.isdigit() and 1 <= int(t) <= len(options) for t in tokens):
            return sorted({int(t) - 1 for t in tokens})
        print(f"Enter numbers between 1 and {len(options)}.")
