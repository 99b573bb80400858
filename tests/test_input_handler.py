import io
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from ask_gemini.utils.input_handler import MultilineInputHandler, parse_line_range, read_selection, select_lines

TEXT = "one\ntwo\nthree\nfour\n"


@pytest.mark.parametrize("value,expected", [
    ("2:3", (2, 3)),
    ("5", (5, 5)),
    ("3:", (3, None)),
    (":4", (1, 4)),
])
def test_parse_line_range(value, expected):
    assert parse_line_range(value) == expected


@pytest.mark.parametrize("value", ["a:b", "5:2", "0:3", "1:x"])
def test_parse_line_range_rejects(value):
    with pytest.raises(ValueError):
        parse_line_range(value)


def test_select_lines():
    assert select_lines(TEXT, 2, 3) == "two\nthree"
    assert select_lines(TEXT, 3) == "three\nfour"
    assert select_lines(TEXT, 4, 99) == "four"
    assert select_lines(TEXT, 9, 12) == ""


def test_read_selection_from_file(tmp_path):
    path = tmp_path / "code.py"
    path.write_text(TEXT, encoding="utf-8")
    assert read_selection(path, 1, 2) == "one\ntwo"


def test_read_selection_from_stdin():
    assert read_selection(None, 2, 2, stdin=io.StringIO(TEXT)) == "two"


def quiet_console():
    return Console(file=io.StringIO())


def test_piped_input_is_read_whole():
    handler = MultilineInputHandler(console=quiet_console(), stdin=io.StringIO("line one\nline two\n"))
    assert handler.get_input() == ("line one\nline two\n", False)


def test_exhausted_pipe_raises_eof():
    handler = MultilineInputHandler(console=quiet_console(), stdin=io.StringIO(""))
    with pytest.raises(EOFError):
        handler.get_input()


def tty():
    stdin = MagicMock()
    stdin.isatty.return_value = True
    return stdin


def test_single_line_from_tty(monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt="": "What is a monad?")
    assert MultilineInputHandler(console=quiet_console(), stdin=tty()).get_input() == ("What is a monad?", False)


def test_multiline_from_tty(monkeypatch):
    answers = iter(["> first", "second", "EOF"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    assert MultilineInputHandler(console=quiet_console(), stdin=tty()).get_input() == ("first\nsecond", True)
