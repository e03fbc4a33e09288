import pytest

from treeshell.tokenizer import TokenizeError, split_command, tokenize_line


def test_simple_words_and_pipe():
    assert tokenize_line("echo abc | wc -c") == ["echo", "abc", "|", "wc", "-c"]


def test_operators_without_spaces():
    assert tokenize_line("a&&b||c>>d<<e;f") == [
        "a", "&&", "b", "||", "c", ">>", "d", "<<", "e", ";", "f",
    ]


def test_single_char_operators():
    assert tokenize_line("a&b|c>d<e") == ["a", "&", "b", "|", "c", ">", "d", "<", "e"]


def test_tabs_separate_words():
    assert tokenize_line("a\tb  c") == ["a", "b", "c"]


def test_empty_and_blank_lines_give_no_tokens():
    assert tokenize_line("") == []
    assert tokenize_line(" \t  ") == []


def test_double_quotes_keep_spaces():
    assert tokenize_line('echo "hello world"') == ["echo", "hello world"]


def test_single_quotes_keep_operators():
    assert tokenize_line("echo 'a | b ; c'") == ["echo", "a | b ; c"]


def test_other_quote_inside_quotes_is_literal():
    assert tokenize_line("'say \"hi\"'") == ['say "hi"']


def test_quotes_join_adjacent_text():
    assert tokenize_line('a"b c"d') == ["ab cd"]


def test_empty_quotes_produce_no_token():
    assert tokenize_line('echo ""') == ["echo"]


def test_escape_keeps_operator_in_word():
    tokens = tokenize_line("a\\|b")
    assert len(tokens) == 1
    assert "|" in tokens[0]


def test_escaped_space_joins_words():
    tokens = tokenize_line("a\\ b")
    assert len(tokens) == 1
    assert tokens[0].split(" ") == ["a", "b"]


def test_trailing_backslash_is_dropped():
    assert tokenize_line("abc\\") == ["abc"]


@pytest.mark.parametrize("line", ['echo "abc', "echo 'abc", "'", 'a"b'])
def test_unclosed_quote_raises(line):
    with pytest.raises(TokenizeError):
        tokenize_line(line)


def test_split_command_with_arguments():
    assert split_command("  ls -la  /tmp") == ("ls", "-la  /tmp")


def test_split_command_without_arguments():
    assert split_command("ls") == ("ls", None)
    assert split_command("\tls   ") == ("ls", None)


def test_split_command_blank_line():
    assert split_command("   ") == ("", None)