"""Top-level shell driver: script files, piped input and the read loop."""

from __future__ import annotations

import os
import sys
from typing import Mapping, MutableMapping, Optional, Sequence, TextIO

from .executor import Builtin, Executor
from .exit_status import exit_code_from_args, exit_status_code, is_exit_status, make_exit_status
from .tree import NodeType, parse_line

DEFAULT_NLSPATH = (
    "/usr/share/locale/%L/LC_MESSAGES/%N.cat:"
    "/usr/share/locale/%l/LC_MESSAGES/%N.cat"
)
ERROR_STATUS = 84


def add_default_nlspath(env: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of ``env`` with a default NLSPATH when none is set."""
    result = dict(env)
    result.setdefault("NLSPATH", DEFAULT_NLSPATH)
    return result


def exit_request(line: str) -> Optional[int]:
    """Return the exit code if ``line`` is an ``exit`` command, else None.

    Raises ValueError when the line is an ``exit`` command with a malformed
    argument list.
    """
    node = parse_line(line)
    if node is None:
        return None
    try:
        if node.type is not NodeType.CMD or not node.args or node.args[0] != "exit":
            return None
        return exit_code_from_args(node.args)
    finally:
        node.close()


class Shell:
    """Run command lines against an environment and a set of builtins."""

    def __init__(
        self,
        env: Optional[MutableMapping[str, str]] = None,
        builtins: Optional[Mapping[str, Builtin]] = None,
    ) -> None:
        self.env: MutableMapping[str, str] = env if env is not None else {}
        self.builtins = dict(builtins or {})
        self.exit_code = 0
        self._stdin: Optional[TextIO] = None

    def _execute(self, line: str) -> Optional[int]:
        tree = parse_line(line)
        if tree is None:
            return None
        executor = Executor(self.env, self.builtins, self._stdin)
        try:
            return executor.exec_tree(tree)
        finally:
            tree.close()

    def run_line(self, line: str) -> bool:
        """Run one script line; return True when the script must stop."""
        try:
            code = exit_request(line)
        except ValueError:
            code = None
        if code is not None:
            self.exit_code = code
            return True
        status = self._execute(line)
        if status is None:
            return False
        self.exit_code = status
        if status == ERROR_STATUS:
            self.exit_code = 0
            return True
        return False

    def handle_pipe_line(self, line: str) -> bool:
        """Run one line read from piped input; return True to stop reading."""
        if line.startswith("\n"):
            return False
        if line.endswith("\n"):
            line = line[:-1]
        try:
            code = exit_request(line)
        except ValueError:
            code = None
        if code is not None:
            self.exit_code = code
            return True
        status = self._execute(line)
        if status is not None:
            self.exit_code = status
        return False

    def handle_line(self, line: str) -> int:
        """Run one interactive line and return its status.

        An ``exit`` command yields an encoded exit status; a malformed
        ``exit`` is reported and yields 0.
        """
        try:
            code = exit_request(line)
        except ValueError:
            print("exit: Expression Syntax.", file=sys.stderr)
            return 0
        if code is not None:
            return make_exit_status(code)
        status = self._execute(line)
        return 0 if status is None else status

    def run_file(self, path: str) -> int:
        """Run every non-empty line of the script at ``path``; return the exit code."""
        with open(path, encoding="utf-8", errors="replace") as script:
            content = script.read()
        for line in content.split("\n"):
            if not line:
                continue
            if self.run_line(line):
                break
        return self.exit_code

    def run_stream(self, stream: TextIO) -> int:
        """Run the lines read from ``stream`` until its end or an ``exit``."""
        previous = self._stdin
        self._stdin = stream
        try:
            for line in iter(stream.readline, ""):
                if self.handle_pipe_line(line):
                    break
        finally:
            self._stdin = previous
        return self.exit_code

    def run_interactive(self) -> int:
        """Read and run lines from the terminal until ``exit`` or end of input."""
        while True:
            try:
                line = input()
            except KeyboardInterrupt:
                print()
                continue
            except EOFError:
                print("exit")
                return ERROR_STATUS
            if not line:
                continue
            status = self.handle_line(line)
            if is_exit_status(status):
                print("exit")
                return exit_status_code(status)
            if status == ERROR_STATUS:
                return ERROR_STATUS


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the shell on a script file, piped input or the terminal."""
    args = list(sys.argv[1:] if argv is None else argv)
    shell = Shell(add_default_nlspath(os.environ))
    if args:
        try:
            return shell.run_file(args[0])
        except OSError:
            return ERROR_STATUS
    if not sys.stdin.isatty():
        return shell.run_stream(sys.stdin)
    return shell.run_interactive()


if __name__ == "__main__":
    sys.exit(main())