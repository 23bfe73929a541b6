"""
Parser Tests

Run with: python -m pytest tests/test_parser.py -v
"""

import unittest

from conch.exceptions import ParseError
from conch.shell.ast import (
    Command, Pipe, And, Or, Sequence,
    RedirectOut, RedirectAppend, RedirectIn,
    Subshell, Background, Empty, walk,
)
from conch.shell.grammar import Token, TokenType
from conch.shell.lexer import Lexer
from conch.shell.parser import Parser, parse


W = Token.word
PIPE = Token.operator(TokenType.PIPE)
AND = Token.operator(TokenType.AND)
OR = Token.operator(TokenType.OR)
SEP = Token.operator(TokenType.SEMICOLON)
OUT = Token.operator(TokenType.REDIRECT_OUT)
APPEND = Token.operator(TokenType.REDIRECT_APPEND)
IN = Token.operator(TokenType.REDIRECT_IN)
BG = Token.operator(TokenType.BACKGROUND)
OPEN = Token.operator(TokenType.OPEN_PAREN)
CLOSE = Token.operator(TokenType.CLOSE_PAREN)


def cmd(program, *args):
    return Command(W(program), tuple(W(a) for a in args))


def parse_line(line):
    return Parser.parse(Lexer.lex(line))


class TestParseCommands(unittest.TestCase):

    def test_single_command(self):
        self.assertEqual(Parser.parse([W("ls")]), cmd("ls"))
        self.assertEqual(Parser.parse([W("ls"), W("-l"), W("/")]), cmd("ls", "-l", "/"))

    def test_pipe(self):
        tokens = [W("ls"), W("-l"), PIPE, W("grep"), W("main")]
        self.assertEqual(
            Parser.parse(tokens),
            Pipe(cmd("ls", "-l"), cmd("grep", "main"))
        )

    def test_chained_pipes_associate_left(self):
        self.assertEqual(
            parse_line("echo foo | cat | wc -l"),
            Pipe(Pipe(cmd("echo", "foo"), cmd("cat")), cmd("wc", "-l"))
        )

    def test_and_or(self):
        self.assertEqual(parse_line("true && echo a"), And(cmd("true"), cmd("echo", "a")))
        self.assertEqual(parse_line("false || echo a"), Or(cmd("false"), cmd("echo", "a")))

    def test_no_precedence_between_kinds(self):
        self.assertEqual(
            parse_line("a && b | c"),
            Pipe(And(cmd("a"), cmd("b")), cmd("c"))
        )
        self.assertEqual(
            parse_line("a | b || c ; d"),
            Sequence(Or(Pipe(cmd("a"), cmd("b")), cmd("c")), cmd("d"))
        )

    def test_sequence(self):
        self.assertEqual(
            Parser.parse([W("echo"), W("foo"), SEP, W("echo"), W("bar")]),
            Sequence(cmd("echo", "foo"), cmd("echo", "bar"))
        )

    def test_trailing_semicolon(self):
        self.assertEqual(
            Parser.parse([W("echo"), W("foo"), SEP]),
            Sequence(cmd("echo", "foo"), Empty())
        )
        self.assertEqual(
            parse_line("echo foo; echo bar;"),
            Sequence(Sequence(cmd("echo", "foo"), cmd("echo", "bar")), Empty())
        )

    def test_redirections(self):
        self.assertEqual(
            Parser.parse([W("echo"), W("foo"), OUT, W("out.txt")]),
            RedirectOut(cmd("echo", "foo"), W("out.txt"))
        )
        self.assertEqual(
            parse_line("echo foo >> log.txt"),
            RedirectAppend(cmd("echo", "foo"), W("log.txt"))
        )
        self.assertEqual(
            parse_line("sort < in.txt"),
            RedirectIn(cmd("sort"), W("in.txt"))
        )

    def test_redirect_applies_to_whole_left(self):
        self.assertEqual(
            parse_line("echo foo | cat | cat > out"),
            RedirectOut(Pipe(Pipe(cmd("echo", "foo"), cmd("cat")), cmd("cat")), W("out"))
        )

    def test_words_after_redirect_target_are_rejected(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("echo foo > out bar")
        self.assertEqual(ctx.exception.token, W("bar"))

    def test_background(self):
        self.assertEqual(parse_line("sleep 1 &"), Background(cmd("sleep", "1")))
        self.assertEqual(
            parse_line("echo a | cat &"),
            Background(Pipe(cmd("echo", "a"), cmd("cat")))
        )

    def test_command_after_background_needs_separator(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("sleep 1 & echo done")
        self.assertEqual(ctx.exception.token, W("echo"))

    def test_background_then_sequence(self):
        self.assertEqual(
            parse_line("sleep 1 & ; echo done"),
            Sequence(Background(cmd("sleep", "1")), cmd("echo", "done"))
        )

    def test_quoted_operator_is_an_argument(self):
        self.assertEqual(parse_line("echo '|' x"), cmd("echo", "|", "x"))

    def test_module_function(self):
        self.assertEqual(parse([W("ls")]), cmd("ls"))


class TestParseGroups(unittest.TestCase):

    def test_subshell(self):
        self.assertEqual(
            Parser.parse([OPEN, W("echo"), W("foo"), CLOSE]),
            Subshell(cmd("echo", "foo"))
        )

    def test_subshell_with_trailing_semicolon(self):
        self.assertEqual(
            Parser.parse([OPEN, W("echo"), W("foo"), SEP, CLOSE]),
            Subshell(Sequence(cmd("echo", "foo"), Empty()))
        )

    def test_nested_subshells(self):
        self.assertEqual(
            parse_line("(((echo foo)))"),
            Subshell(Subshell(Subshell(cmd("echo", "foo"))))
        )

    def test_subshell_as_left_operand(self):
        self.assertEqual(
            parse_line("(echo foo | cat) | cat"),
            Pipe(Subshell(Pipe(cmd("echo", "foo"), cmd("cat"))), cmd("cat"))
        )
        self.assertEqual(
            parse_line("((echo foo | cat) | cat)"),
            Subshell(Pipe(Subshell(Pipe(cmd("echo", "foo"), cmd("cat"))), cmd("cat")))
        )

    def test_subshell_as_right_operand(self):
        self.assertEqual(
            parse_line("true && (echo a | cat)"),
            And(cmd("true"), Subshell(Pipe(cmd("echo", "a"), cmd("cat"))))
        )
        self.assertEqual(
            parse_line("echo a; (echo b)"),
            Sequence(cmd("echo", "a"), Subshell(cmd("echo", "b")))
        )

    def test_stray_close_paren(self):
        with self.assertRaises(ParseError) as ctx:
            Parser.parse([OPEN, W("echo"), W("foo"), CLOSE, CLOSE])
        self.assertEqual(ctx.exception.token, CLOSE)
        self.assertIn(")", str(ctx.exception))

    def test_unclosed_group(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("(echo foo")
        self.assertEqual(ctx.exception.token, OPEN)

    def test_empty_group(self):
        with self.assertRaises(ParseError):
            parse_line("()")

    def test_operand_after_group_without_operator(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("(echo a) echo b")
        self.assertEqual(ctx.exception.token, W("echo"))


class TestParseErrors(unittest.TestCase):

    def test_operator_without_left_operand(self):
        for tokens, bad in [
            ([PIPE, W("cat")], PIPE),
            ([AND, W("echo")], AND),
            ([OR, W("echo")], OR),
            ([SEP, W("echo")], SEP),
            ([OUT, W("file")], OUT),
            ([APPEND, W("file")], APPEND),
            ([IN, W("file")], IN),
            ([BG], BG),
        ]:
            with self.subTest(operator=str(bad)):
                with self.assertRaises(ParseError) as ctx:
                    Parser.parse(tokens)
                self.assertEqual(ctx.exception.token, bad)

    def test_missing_right_operand(self):
        for line in ["echo a |", "echo a &&", "echo a ||"]:
            with self.subTest(line=line):
                with self.assertRaises(ParseError):
                    parse_line(line)

    def test_operator_as_right_operand(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("echo a && ; echo b")
        self.assertEqual(ctx.exception.token, SEP)

    def test_missing_redirect_target(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("echo a >")
        self.assertEqual(ctx.exception.token, OUT)
        with self.assertRaises(ParseError):
            parse_line("echo a > | cat")

    def test_empty_input(self):
        with self.assertRaises(ParseError) as ctx:
            Parser.parse([])
        self.assertIsNone(ctx.exception.token)
        self.assertEqual(str(ctx.exception), "no command given")

    def test_empty_program(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("'' foo")
        self.assertEqual(ctx.exception.token, Token.word(""))
        self.assertEqual(str(ctx.exception), "empty program name")

        with self.assertRaises(ParseError) as ctx:
            parse_line("echo a | \"\"")
        self.assertEqual(str(ctx.exception), "empty program name")


class TestTree(unittest.TestCase):

    def test_walk_visits_every_node(self):
        tree = parse_line("(a && b) | c > out")
        kinds = [type(node).__name__ for node in walk(tree)]
        self.assertEqual(
            kinds,
            ['RedirectOut', 'Pipe', 'Subshell', 'And', 'Command', 'Command', 'Command']
        )

    def test_nodes_are_immutable(self):
        node = cmd("ls")
        with self.assertRaises(Exception):
            node.program = W("rm")

    def test_command_argv(self):
        self.assertEqual(cmd("ls", "-l", "/").argv, ["ls", "-l", "/"])


if __name__ == '__main__':
    unittest.main()
