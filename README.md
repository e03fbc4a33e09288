# treeshell

A small command shell. Each input line is split into tokens, parsed into a
syntax tree and run. It understands:

- pipelines: `echo abc | wc -c`
- sequences: `echo a ; echo b`
- logical operators: `make && ./run || echo failed`
- redirections: `cat < in > out`, `echo more >> out`
- here-documents: `cat << EOF`
- single and double quotes, and backslash escapes
- `exit [code]`, with the code taken modulo 256

## Installing

```
pip install .
```

## Running

Run a script file, one command line per line:

```
treeshell script.sh
```

Or feed commands on standard input:

```
echo "echo hello | wc -c" | treeshell
```

Here-documents in piped input read their lines from the same input, so the
lines after `cat << EOF` up to `EOF` are consumed as the document's content.

When standard input is a terminal, lines are read one at a time with no
prompt; `exit` or end of input prints `exit` and stops the shell.

The shell's exit status is the status of the last command, or the code given
to `exit`. A script file that cannot be opened gives status 84. If `NLSPATH`
is not set in the environment, a default value is added before any command
runs.

Commands are looked up on the `PATH` of the shell's environment; a name
containing `/` is used as given. A command that cannot be found is reported
as `name: Command not found.` and gives status 1.

## Using it from Python

```python
from treeshell.tokenizer import tokenize_line
from treeshell.tree import parse_line, NodeType
from treeshell.shell import Shell

tokenize_line("cat < in >> out")   # ['cat', '<', 'in', '>>', 'out']

tree = parse_line("echo a | cat ; echo b")
tree.type is NodeType.SEQUENCE     # True
tree.left.type is NodeType.PIPE    # True

shell = Shell({"PATH": "/bin:/usr/bin"})
shell.run_line("echo hello > /tmp/greeting")   # False: keep going
shell.run_line("exit 7")                        # True: stop
shell.exit_code                                 # 7
```

`parse_line` returns `None` for a line that is empty or not valid, such as
`echo a |`, a lone `;` or an unclosed quote. `tokenize_line` raises
`TokenizeError` on an unclosed quote.

Other pieces:

- `treeshell.tree.Parser` parses a token list by precedence: `;` lowest,
  then `&&` / `||`, then `|`, then single commands with their redirections.
- `treeshell.executor.Executor` runs a tree against an environment mapping
  (`exec_tree`, `exec_pipe`, `exec_cmd_with_redirections`).
- `treeshell.heredoc.read_heredoc` and `prepare_tree_heredocs` read
  here-document content before a tree is run.
- `treeshell.exit_status` parses `exit` arguments (`parse_exit_code_arg`,
  `exit_code_from_args`) and encodes an exit request as a status value
  (`make_exit_status`, `is_exit_status`, `exit_status_code`).
- `Shell` also offers `handle_line`, `handle_pipe_line`, `run_file` and
  `run_stream`.

## Builtins

The shell comes with no built-in commands of its own: `cd`, `env`,
`setenv`, `unsetenv` and `history` are not provided, and every command other
than `exit` is started as an outside program. Builtins can be supplied as a
mapping from a command name to a callable that takes the argument list and
the environment mapping, prints to `sys.stdout` and returns a status:

```python
def setenv(args, env):
    env[args[1]] = args[2] if len(args) > 2 else ""
    return 0

shell = Shell({"PATH": "/bin:/usr/bin"}, builtins={"setenv": setenv})
shell.run_line("setenv GREETING hello")
```

## What it does not do

- no built-in commands, as described above
- no history and no `!` expansion
- no variable, tilde or glob expansion
- no prompt, line editing or job control in terminal mode