"""Tests for interactive prompts."""

import asyncio
import threading
import time
from unittest.mock import AsyncMock, patch

import pytest

from common import prompts


@pytest.fixture(autouse=True)
def fresh_stdin_reader(monkeypatch):
    """Keep reader threads left over from one test away from the next."""
    monkeypatch.setattr(prompts, "_stdin", prompts._StdinReader())


class TestReadLine:
    """Line input with a timeout."""

    def test_returns_input(self):
        with patch("builtins.input", return_value="yes"):
            assert asyncio.run(prompts.read_line("? ")) == "yes"

    def test_eof(self):
        with patch("builtins.input", side_effect=EOFError):
            assert asyncio.run(prompts.read_line("? ")) is None

    def test_timeout(self):
        def _block(_prompt):
            time.sleep(1)
            return "late"

        with patch("builtins.input", side_effect=_block):
            assert asyncio.run(prompts.read_line("? ", timeout=0.05)) is None

    def test_pending_read_serves_next_prompt(self):
        release = threading.Event()
        prompts_seen = []

        def _input(prompt):
            prompts_seen.append(prompt)
            release.wait(5)
            return "y"

        async def _two_prompts():
            first = await prompts.read_line("first? ", timeout=0.05)
            asyncio.get_running_loop().call_later(0.05, release.set)
            second = await prompts.read_line("second? ", timeout=5)
            return first, second

        with patch("builtins.input", side_effect=_input):
            assert asyncio.run(_two_prompts()) == (None, "y")
        assert prompts_seen == ["first? "]

    def test_late_answer_is_discarded(self):
        answers = iter(["late", "fresh"])
        release = threading.Event()

        def _input(_prompt):
            value = next(answers)
            if value == "late":
                release.wait(5)
            return value

        async def _late_then_fresh():
            first = await prompts.read_line("? ", timeout=0.05)
            release.set()
            await asyncio.sleep(0.1)
            second = await prompts.read_line("? ", timeout=5)
            return first, second

        with patch("builtins.input", side_effect=_input):
            assert asyncio.run(_late_then_fresh()) == (None, "fresh")


class TestQuestions:
    """Yes/no and selection prompts."""

    def test_yes_no_retries_until_valid(self):
        with patch.object(prompts, "read_line", new=AsyncMock(side_effect=["maybe", "Y"])):
            assert asyncio.run(prompts.ask_yes_no("Continue?")) is True

    def test_yes_no_timeout(self):
        with patch.object(prompts, "read_line", new=AsyncMock(return_value=None)):
            assert asyncio.run(prompts.ask_yes_no("Continue?", timeout=1)) is None

    def test_yes_no_timeout_spans_invalid_answers(self):
        read = AsyncMock(side_effect=["maybe", "y"])
        with patch.object(prompts, "read_line", new=read), \
                patch.object(prompts, "time") as clock:
            clock.monotonic.side_effect = [100.0, 100.0, 190.0]
            assert asyncio.run(prompts.ask_yes_no("Continue?", timeout=120)) is True
        assert [c.args[1] for c in read.await_args_list] == [120.0, 30.0]

    def test_yes_no_deadline_spent_on_invalid_answer(self):
        read = AsyncMock(return_value="maybe")
        with patch.object(prompts, "read_line", new=read), \
                patch.object(prompts, "time") as clock:
            clock.monotonic.side_effect = [100.0, 100.0, 230.0]
            assert asyncio.run(prompts.ask_yes_no("Continue?", timeout=120)) is None
        read.assert_awaited_once()

    def test_select_one(self):
        with patch.object(prompts, "read_line", new=AsyncMock(side_effect=["9", "2"])):
            assert asyncio.run(prompts.select_one("Pick", ["a", "b"])) == 1

    def test_select_many(self):
        with patch.object(prompts, "read_line", new=AsyncMock(return_value="3, 1 3")):
            assert asyncio.run(prompts.select_many("Pick", ["a", "b", "c"])) == [0, 2]

    def test_select_many_empty(self):
        with patch.object(prompts, "read_line", new=AsyncMock(return_value="")):
            assert asyncio.run(prompts.select_many("Pick", ["a"])) == []
