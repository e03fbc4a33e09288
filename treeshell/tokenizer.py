"""Split a command line into words and operator tokens."""

from __future__ import annotations

OPERATOR_CHARS = frozenset("|&><;")
DOUBLE_OPERATORS = frozenset({"&&", "||", ">>", "<<"})
QUOTES = frozenset("'\"")
BLANKS = frozenset(" \t")


class TokenizeError(ValueError):
    """Raised when a line cannot be split into tokens (e.g. an open quote)."""


class _Tokenizer:
    def __init__(self, line: str) -> None:
        self.line = line
        self.pos = 0
        self.quote: str | None = None
        self.buf: list[str] = []
        self.tokens: list[str] = []

    def _char(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.line[index] if index < len(self.line) else ""

    def _flush(self) -> None:
        if self.buf:
            self.tokens.append("".join(self.buf))
            self.buf.clear()

    def _consume_escape(self) -> bool:
        if self._char() != "\\":
            return False
        following = self._char(1)
        if not following:
            self.pos += 1
            return True
        self.buf.append(following)
        self.pos += 2
        return True

    def _add_operator(self) -> None:
        pair = self.line[self.pos:self.pos + 2]
        op = pair if pair in DOUBLE_OPERATORS else self._char()
        self.tokens.append(op)
        self.pos += len(op)

    def _step(self) -> None:
        char = self._char()
        if self.quote is not None:
            if self._consume_escape():
                return
            if char == self.quote:
                self.quote = None
            else:
                self.buf.append(char)
            self.pos += 1
            return
        if self._consume_escape():
            return
        if char in QUOTES:
            self.quote = char
            self.pos += 1
        elif char in BLANKS:
            self._flush()
            self.pos += 1
        elif char in OPERATOR_CHARS:
            self._flush()
            self._add_operator()
        else:
            self.buf.append(char)
            self.pos += 1

    def run(self) -> list[str]:
        while self.pos < len(self.line):
            self._step()
        if self.quote is not None:
            raise TokenizeError(f"Unmatched {self.quote}.")
        self._flush()
        return self.tokens


def tokenize_line(line: str) -> list[str]:
    """Return the words and operators of ``line``.

    Quotes group characters (and are removed), a backslash escapes the next
    character, blanks separate words and ``| & > < ;`` form operators, with
    ``&& || >> <<`` read as one token.
    """
    return _Tokenizer(line).run()


def split_command(line: str) -> tuple[str, str | None]:
    """Split ``line`` into its first word and the rest (``None`` if empty)."""
    stripped = line.lstrip(" \t")
    end = 0
    while end < len(stripped) and stripped[end] not in BLANKS:
        end += 1
    command = stripped[:end]
    rest = stripped[end:].lstrip(" \t")
    return command, rest or None