"""Encoding of the ``exit`` request and parsing of its argument."""

from __future__ import annotations

from typing import Optional, Sequence

from .tree import Node, NodeType

_EXIT_BASE = -1000
_EXIT_LOWEST = -1255


def make_exit_status(code: int) -> int:
    """Encode an exit request for ``code`` as a status value."""
    return _EXIT_BASE - code


def is_exit_status(status: int) -> bool:
    """Tell whether ``status`` encodes an exit request."""
    return _EXIT_LOWEST <= status <= _EXIT_BASE


def exit_status_code(status: int) -> int:
    """Recover the exit code from an encoded exit request."""
    return _EXIT_BASE - status


def _is_number(text: Optional[str]) -> bool:
    if not text:
        return False
    digits = text[1:] if text[0] in "+-" else text
    return bool(digits) and all("0" <= c <= "9" for c in digits)


def parse_exit_code_arg(text: str) -> int:
    """Parse an ``exit`` argument into a code in 0..255; raise ValueError if invalid."""
    if not _is_number(text):
        raise ValueError(f"invalid exit code: {text!r}")
    return int(text) % 256


def exit_code_from_args(args: Optional[Sequence[str]]) -> int:
    """Return the exit code for an ``exit`` argument list; raise ValueError if invalid."""
    if not args:
        raise ValueError("no exit command")
    if len(args) == 1:
        return 0
    if len(args) > 2:
        raise ValueError("too many arguments to exit")
    return parse_exit_code_arg(args[1])


def _is_exit_cmd(node: Node) -> bool:
    return node.type is NodeType.CMD and bool(node.args) and node.args[0] == "exit"


def find_exit_in_pipe(node: Optional[Node]) -> tuple[Optional[int], bool]:
    """Look for a valid ``exit`` command inside a pipeline.

    Returns ``(code, invalid)``: ``code`` is the exit code of the first valid
    ``exit`` found in a pipe (or None), and ``invalid`` is True if a malformed
    ``exit`` was met in a pipe before the search stopped.
    """
    invalid = False

    def search(current: Optional[Node], in_pipe: bool) -> Optional[int]:
        nonlocal invalid
        if current is None:
            return None
        if current.type is NodeType.PIPE:
            found = search(current.left, True)
            return found if found is not None else search(current.right, True)
        if in_pipe and _is_exit_cmd(current):
            try:
                return exit_code_from_args(current.args)
            except ValueError:
                invalid = True
        found = search(current.left, in_pipe)
        return found if found is not None else search(current.right, in_pipe)

    code = search(node, False)
    return code, invalid