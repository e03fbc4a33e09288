"""Command tree nodes and the recursive-descent parser that builds them."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .tokenizer import TokenizeError, tokenize_line

CONTROL_TOKENS = frozenset({"|", "&&", "||", ";"})
REDIRECTION_TOKENS = frozenset({"<", "<<", ">", ">>"})
LOGIC_TOKENS = frozenset({"&&", "||"})


class NodeType(enum.Enum):
    CMD = enum.auto()
    PIPE = enum.auto()
    SEQUENCE = enum.auto()
    AND = enum.auto()
    OR = enum.auto()
    REDIR_LEFT = enum.auto()
    REDIR_RIGHT = enum.auto()
    REDIR_APPEND = enum.auto()
    EOF = enum.auto()


@dataclass
class Node:
    """One node of a command tree."""

    type: NodeType
    left: Optional["Node"] = None
    right: Optional["Node"] = None
    input: Optional[str] = None
    output: Optional[str] = None
    append: bool = False
    heredoc: bool = False
    heredoc_fd: int = -1
    args: list[str] = field(default_factory=list)

    def close(self) -> None:
        """Release prepared here-document descriptors in this subtree."""
        for child in (self.left, self.right):
            if child is not None:
                child.close()
        if self.heredoc_fd != -1:
            try:
                os.close(self.heredoc_fd)
            except OSError:
                pass
            self.heredoc_fd = -1


class Parser:
    """Build a tree from tokens; each parse method returns None on a syntax error."""

    def __init__(self, tokens: Sequence[str]) -> None:
        self.tokens = list(tokens)
        self.pos = 0

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def parse_sequence(self) -> Optional[Node]:
        left = self.parse_logic()
        if left is None:
            return None
        while self._peek() == ";":
            self.pos += 1
            right = self.parse_logic()
            if right is None:
                left.close()
                return None
            left = Node(NodeType.SEQUENCE, left=left, right=right)
        return left

    def parse_logic(self) -> Optional[Node]:
        left = self.parse_pipe()
        if left is None:
            return None
        while (token := self._peek()) in LOGIC_TOKENS:
            node_type = NodeType.AND if token == "&&" else NodeType.OR
            self.pos += 1
            right = self.parse_pipe()
            if right is None:
                left.close()
                return None
            left = Node(node_type, left=left, right=right)
        return left

    def parse_pipe(self) -> Optional[Node]:
        left = self.parse_command()
        if left is None:
            return None
        while self._peek() == "|":
            self.pos += 1
            right = self.parse_command()
            if right is None:
                left.close()
                return None
            left = Node(NodeType.PIPE, left=left, right=right)
        return left

    def _consume_redirection(self, node: Node) -> bool:
        op = self._peek()
        self.pos += 1
        target = self._peek()
        if target is None or target in CONTROL_TOKENS:
            return False
        if op == "<":
            node.heredoc = False
            node.input = target
        elif op == "<<":
            node.heredoc = True
            node.input = target
        else:
            node.append = op == ">>"
            node.output = target
        self.pos += 1
        return True

    def parse_command(self) -> Optional[Node]:
        node = Node(NodeType.CMD)
        while (token := self._peek()) is not None and token not in CONTROL_TOKENS:
            if token in REDIRECTION_TOKENS:
                if not self._consume_redirection(node):
                    return None
            else:
                node.args.append(token)
                self.pos += 1
        if not node.args and node.input is None and node.output is None:
            return None
        return node


def parse_line(line: str) -> Optional[Node]:
    """Parse a whole line; return None if it is empty or not valid syntax."""
    try:
        tokens = tokenize_line(line)
    except TokenizeError:
        return None
    if not tokens:
        return None
    parser = Parser(tokens)
    tree = parser.parse_sequence()
    if tree is not None and not parser.at_end:
        tree.close()
        return None
    return tree