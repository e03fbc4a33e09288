"""Here-document reading and preloading before a tree is run."""

from __future__ import annotations

import os
import sys
import tempfile
from typing import Optional, TextIO

from .tree import Node, NodeType


def read_heredoc(delimiter: str, stream: Optional[TextIO] = None) -> str:
    """Read lines from ``stream`` up to a line equal to ``delimiter``.

    The delimiter line is consumed but not returned. Every returned line ends
    with a newline. Reading stops quietly at end of input.
    """
    source = sys.stdin if stream is None else stream
    lines = []
    for raw in iter(source.readline, ""):
        line = raw[:-1] if raw.endswith("\n") else raw
        if line == delimiter:
            break
        lines.append(line + "\n")
    return "".join(lines)


def _content_fd(text: str) -> int:
    """Return a readable descriptor positioned at the start of ``text``."""
    with tempfile.TemporaryFile() as tmp:
        tmp.write(text.encode())
        tmp.flush()
        fd = os.dup(tmp.fileno())
    os.lseek(fd, 0, os.SEEK_SET)
    return fd


def prepare_tree_heredocs(node: Optional[Node], stream: Optional[TextIO] = None) -> None:
    """Read every pending here-document of the tree, left to right.

    Each command node with a here-document and no prepared descriptor gets
    one holding its content. Raises OSError if a descriptor cannot be made.
    """
    if node is None:
        return
    prepare_tree_heredocs(node.left, stream)
    if (
        node.type is NodeType.CMD
        and node.heredoc
        and node.input is not None
        and node.heredoc_fd == -1
    ):
        node.heredoc_fd = _content_fd(read_heredoc(node.input, stream))
    prepare_tree_heredocs(node.right, stream)