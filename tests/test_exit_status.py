import pytest

from treeshell.exit_status import (
    exit_code_from_args,
    exit_status_code,
    find_exit_in_pipe,
    is_exit_status,
    make_exit_status,
    parse_exit_code_arg,
)
from treeshell.tree import parse_line


@pytest.mark.parametrize("code", range(256))
def test_exit_status_round_trip(code):
    status = make_exit_status(code)
    assert is_exit_status(status)
    assert exit_status_code(status) == code


@pytest.mark.parametrize("status", [0, 1, 84, -1, -999, -1256, -5000])
def test_ordinary_statuses_are_not_exit(status):
    assert not is_exit_status(status)


def test_parse_plain_and_signed():
    assert parse_exit_code_arg("7") == 7
    assert parse_exit_code_arg("+5") == parse_exit_code_arg("5")


def test_parse_wraps_modulo_256():
    assert parse_exit_code_arg("300") == parse_exit_code_arg("44")
    assert parse_exit_code_arg("256") == parse_exit_code_arg("0")


def test_parse_negative_wraps_up():
    assert parse_exit_code_arg("-1") == 255
    assert parse_exit_code_arg("-256") == parse_exit_code_arg("0")


@pytest.mark.parametrize("text", ["a", "", "+", "-", "1a", "1 2", "--1"])
def test_parse_rejects_non_numbers(text):
    with pytest.raises(ValueError):
        parse_exit_code_arg(text)


def test_exit_code_from_args():
    assert exit_code_from_args(["exit"]) == 0
    assert exit_code_from_args(["exit", "7"]) == 7


@pytest.mark.parametrize("args", [None, [], ["exit", "1", "2"], ["exit", "a"]])
def test_exit_code_from_args_invalid(args):
    with pytest.raises(ValueError):
        exit_code_from_args(args)


def test_find_exit_in_pipe_found():
    assert find_exit_in_pipe(parse_line("exit 3 | cat")) == (3, False)
    assert find_exit_in_pipe(parse_line("ls | exit")) == (0, False)


def test_find_exit_outside_pipe_is_ignored():
    assert find_exit_in_pipe(parse_line("exit 3")) == (None, False)
    assert find_exit_in_pipe(parse_line("exit 3 ; ls")) == (None, False)


def test_find_exit_in_pipe_invalid():
    assert find_exit_in_pipe(parse_line("ls | exit 1 2")) == (None, True)
    assert find_exit_in_pipe(parse_line("ls | exit a")) == (None, True)


def test_find_exit_in_nested_pipe_after_logic():
    assert find_exit_in_pipe(parse_line("ls && echo x | exit 4")) == (4, False)


def test_find_exit_none_tree():
    assert find_exit_in_pipe(None) == (None, False)