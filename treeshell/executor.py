"""Run command trees: sequences, logic operators, pipelines and redirections."""

from __future__ import annotations

import contextlib
import os
import subprocess
import sys
import tempfile
from typing import Callable, Iterator, Mapping, MutableMapping, Optional, TextIO, Union

from .exit_status import is_exit_status
from .heredoc import prepare_tree_heredocs
from .tree import Node, NodeType

Builtin = Callable[[list, MutableMapping[str, str]], int]
_Outcome = Union[int, subprocess.Popen]


class RedirectionError(Exception):
    """Raised when a redirection target cannot be opened."""


def _status_of(returncode: int) -> int:
    return 1 if returncode < 0 else returncode


def _empty_fd() -> int:
    read_end, write_end = os.pipe()
    os.close(write_end)
    return read_end


def _open_or_raise(path: str, flags: int) -> int:
    try:
        return os.open(path, flags, 0o644)
    except OSError as err:
        raise RedirectionError(f"{path}: {err.strerror}.") from err


def _flatten_pipe(node: Optional[Node]) -> Iterator[Node]:
    if node is None:
        return
    if node.type is NodeType.PIPE:
        yield from _flatten_pipe(node.left)
        yield from _flatten_pipe(node.right)
    else:
        yield node


class Executor:
    """Execute command trees against an environment and a set of builtins.

    ``env`` is a mutable mapping of environment variables, ``builtins`` maps
    a command name to a callable ``(args, env) -> status`` that prints to
    ``sys.stdout``, and ``stdin`` is the stream here-documents are read from.
    """

    def __init__(
        self,
        env: Optional[MutableMapping[str, str]] = None,
        builtins: Optional[Mapping[str, Builtin]] = None,
        stdin: Optional[TextIO] = None,
    ) -> None:
        self.env = env if env is not None else {}
        self.builtins = dict(builtins or {})
        self.stdin = stdin if stdin is not None else sys.stdin

    def exec_tree(self, node: Optional[Node]) -> int:
        """Run a tree, forking for each command; return its status."""
        return self._walk(node, self.exec_cmd_with_redirections)

    def exec_tree_nofork(self, node: Optional[Node]) -> int:
        """Run a tree whose commands replace the current process."""
        return self._walk(node, self._exec_cmd_nofork)

    def _walk(self, node: Optional[Node], run_command: Callable[[Node], int]) -> int:
        if node is None:
            return 0
        try:
            prepare_tree_heredocs(node, self.stdin)
        except OSError:
            return 84
        if node.type is NodeType.SEQUENCE:
            left = self._walk(node.left, run_command)
            return left if is_exit_status(left) else self._walk(node.right, run_command)
        if node.type is NodeType.AND:
            status = self._walk(node.left, run_command)
            if is_exit_status(status) or status != 0:
                return status
            return self._walk(node.right, run_command)
        if node.type is NodeType.OR:
            status = self._walk(node.left, run_command)
            if is_exit_status(status) or status == 0:
                return status
            return self._walk(node.right, run_command)
        if node.type is NodeType.PIPE:
            return self.exec_pipe(node)
        if node.type is NodeType.CMD:
            return run_command(node)
        return 1

    def exec_pipe(self, node: Node) -> int:
        """Run a pipeline; return the status of its last command."""
        commands = list(_flatten_pipe(node))
        outcomes: list[_Outcome] = []
        pending: Optional[int] = None
        try:
            for index, command in enumerate(commands):
                stdin_fd, pending = pending, None
                outcome, pending = self._start_stage(
                    command, stdin_fd, index == len(commands) - 1
                )
                outcomes.append(outcome)
        except OSError:
            if pending is not None:
                os.close(pending)
            for outcome in outcomes:
                if isinstance(outcome, subprocess.Popen):
                    outcome.terminate()
                    outcome.wait()
            return 84
        status = 0
        for outcome in outcomes:
            if isinstance(outcome, subprocess.Popen):
                status = _status_of(outcome.wait())
            else:
                status = outcome
        return status

    def _start_stage(
        self, command: Node, stdin_fd: Optional[int], last: bool
    ) -> tuple[_Outcome, Optional[int]]:
        """Start one pipeline stage; return its outcome and the next stage's input."""
        env = dict(self.env)
        owned = [] if stdin_fd is None else [stdin_fd]
        try:
            try:
                in_fd, out_fd = self._open_redirections(command)
            except RedirectionError as err:
                print(err, file=sys.stderr)
                return 1, None if last else _empty_fd()
            owned.extend(fd for fd in (in_fd, out_fd) if fd is not None)
            stdin = in_fd if in_fd is not None else stdin_fd
            args = command.args
            if out_fd is not None or last:
                outcome = self._start_command(args, env, stdin, out_fd)
                return outcome, None if last else _empty_fd()
            if args and args[0] not in self.builtins:
                read_end, write_end = os.pipe()
                owned.append(write_end)
                try:
                    outcome = self._start_command(args, env, stdin, write_end)
                except BaseException:
                    os.close(read_end)
                    raise
                return outcome, read_end
            with tempfile.TemporaryFile() as tmp:
                outcome = self._start_command(args, env, stdin, tmp.fileno())
                next_fd = os.dup(tmp.fileno())
            os.lseek(next_fd, 0, os.SEEK_SET)
            return outcome, next_fd
        finally:
            for fd in owned:
                os.close(fd)

    def exec_cmd_with_redirections(self, node: Node) -> int:
        """Run one command node with its input and output redirections."""
        try:
            in_fd, out_fd = self._open_redirections(node)
        except RedirectionError as err:
            print(err, file=sys.stderr)
            return 1
        try:
            outcome = self._start_command(node.args, self.env, in_fd, out_fd)
            if isinstance(outcome, subprocess.Popen):
                return _status_of(outcome.wait())
            return outcome
        finally:
            for fd in (in_fd, out_fd):
                if fd is not None:
                    os.close(fd)

    def _open_redirections(self, node: Node) -> tuple[Optional[int], Optional[int]]:
        in_fd: Optional[int] = None
        out_fd: Optional[int] = None
        if node.input is not None:
            in_fd = self._open_input(node)
        if node.output is not None:
            flags = os.O_CREAT | os.O_WRONLY
            flags |= os.O_APPEND if node.append else os.O_TRUNC
            try:
                out_fd = _open_or_raise(node.output, flags)
            except RedirectionError:
                if in_fd is not None:
                    os.close(in_fd)
                raise
        return in_fd, out_fd

    def _open_input(self, node: Node) -> int:
        if not node.heredoc:
            return _open_or_raise(node.input, os.O_RDONLY)
        try:
            prepare_tree_heredocs(node, self.stdin)
        except OSError as err:
            raise RedirectionError(f"{node.input}: {err.strerror}.") from err
        fd, node.heredoc_fd = node.heredoc_fd, -1
        return fd

    def _start_command(
        self,
        args: list,
        env: MutableMapping[str, str],
        stdin: Optional[int],
        stdout: Optional[int],
    ) -> _Outcome:
        if not args:
            return 0
        if args[0] in self.builtins:
            return self._run_builtin(args, env, stdout)
        return self._spawn(args, env, stdin, stdout)

    def _run_builtin(
        self, args: list, env: MutableMapping[str, str], stdout: Optional[int]
    ) -> int:
        builtin = self.builtins[args[0]]
        if stdout is None:
            return builtin(args, env)
        with open(stdout, "w", closefd=False) as out, contextlib.redirect_stdout(out):
            return builtin(args, env)

    @staticmethod
    def _find_command(name: str, env: Mapping[str, str]) -> Optional[str]:
        if "/" in name:
            return name if os.path.exists(name) else None
        for directory in env.get("PATH", "").split(os.pathsep):
            if not directory:
                continue
            candidate = os.path.join(directory, name)
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                return candidate
        return None

    def _spawn(
        self,
        args: list,
        env: Mapping[str, str],
        stdin: Optional[int],
        stdout: Optional[int],
    ) -> _Outcome:
        path = self._find_command(args[0], env)
        if path is None:
            print(f"{args[0]}: Command not found.", file=sys.stderr)
            return 1
        sys.stdout.flush()
        try:
            return subprocess.Popen(
                args, executable=path, env=dict(env), stdin=stdin, stdout=stdout
            )
        except OSError as err:
            print(f"{args[0]}: {err.strerror}.", file=sys.stderr)
            return 1

    def _exec_cmd_nofork(self, node: Node) -> int:
        args = node.args
        if not args:
            return 0
        if args[0] in self.builtins:
            return self._run_builtin(args, self.env, None)
        path = self._find_command(args[0], self.env)
        if path is None:
            print(f"{args[0]}: Command not found.", file=sys.stderr)
            return 1
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            os.execve(path, args, dict(self.env))
        except OSError as err:
            print(f"{args[0]}: {err.strerror}.", file=sys.stderr)
        return 1