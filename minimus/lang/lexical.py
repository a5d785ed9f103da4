"""Lexical analysis for the Minimus language. Breaks a program string into a lazy stream of classified tokens, one at
a time, since the parser only ever needs the current token.

Tokens are loosely defined as follows:

```
<keyword>  ::= "if" | "else" | "while" | "print"
<punct>    ::= "{" | "}" | "(" | ")" | ";"
<operator> ::= "=" | "<" | ">" | "<=" | ">=" | "==" | "=/=" | "+" | "-" | "*" | "/"
<id>       ::= "a" | "b" | ... | "z"             ; exactly one lowercase letter
<int>      ::= <digit>+                          ; kept as text, converted by the interpreter
```

Whitespace separates tokens and is otherwise ignored. Any other character is a LexicalFault.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from minimus.lang.error import LexicalFault


class TokenType(Enum):
    """Every kind of token. Values are the text used to describe the kind in fault messages."""
    IF = "if"
    ELSE = "else"
    WHILE = "while"
    PRINT = "print"

    CURLY_OPEN = "{"
    CURLY_CLOSE = "}"
    PAREN_OPEN = "("
    PAREN_CLOSE = ")"
    SEMICOLON = ";"

    ASSIGNMENT = "="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_EQUAL_THAN = "<="
    GREATER_EQUAL_THAN = ">="
    EQUALS = "=="
    NOT_EQUALS = "=/="
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    ID = "identifier"
    INT = "integer"
    EOI = "end of input"


@dataclass(frozen=True)
class Token:
    """A single classified lexical unit. lexeme is only set for identifiers and integers."""
    type: TokenType
    lexeme: Optional[str] = None
    line: int = 1

    def __repr__(self):
        if self.lexeme is not None:
            return f"{self.type.name}({self.lexeme})"
        return self.type.name

    def __str__(self):
        """Human-readable form used in fault messages."""
        if self.lexeme is not None:
            return f"{self.type.value} '{self.lexeme}'"
        elif self.type is TokenType.EOI:
            return self.type.value
        return f"'{self.type.value}'"


class Lexer:
    """Turns a fixed program string into tokens on demand, with one token of lookahead."""
    END_OF_TEXT = ""

    KEYWORDS = {
        "if": TokenType.IF,
        "else": TokenType.ELSE,
        "while": TokenType.WHILE,
        "print": TokenType.PRINT,
    }
    SINGLES = {
        "{": TokenType.CURLY_OPEN,
        "}": TokenType.CURLY_CLOSE,
        "(": TokenType.PAREN_OPEN,
        ")": TokenType.PAREN_CLOSE,
        ";": TokenType.SEMICOLON,
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "*": TokenType.MULTIPLY,
        "/": TokenType.DIVIDE,
    }

    def __init__(self, program):
        self.program = program
        self.location = 0     # index of the next character to read
        self.line = 1
        self.current = None   # cached lookahead token

    def _next_char(self):
        if self.location >= len(self.program):
            return Lexer.END_OF_TEXT

        char = self.program[self.location]
        self.location += 1
        if char == "\n":
            self.line += 1
        return char

    def _peek_char(self):
        if self.location >= len(self.program):
            return Lexer.END_OF_TEXT
        return self.program[self.location]

    def _token(self, token_type, lexeme=None):
        return Token(token_type, lexeme, self.line)

    def _check_smaller_equal(self):
        """Handles '<' and '<='."""
        if self._peek_char() == "=":
            self._next_char()
            return self._token(TokenType.LESS_EQUAL_THAN)
        return self._token(TokenType.LESS_THAN)

    def _check_greater_equal(self):
        """Handles '>' and '>='."""
        if self._peek_char() == "=":
            self._next_char()
            return self._token(TokenType.GREATER_EQUAL_THAN)
        return self._token(TokenType.GREATER_THAN)

    def _check_equals(self):
        """Handles '==', '=/=' and '='."""
        if self._peek_char() == "=":
            self._next_char()
            return self._token(TokenType.EQUALS)

        if self._peek_char() == "/":
            self._next_char()
            char = self._next_char()
            if char == Lexer.END_OF_TEXT:
                raise LexicalFault("unexpected end of input in '=/='", line=self.line)
            elif char != "=":
                raise LexicalFault("unknown character '{}' in '=/='", char, line=self.line)
            return self._token(TokenType.NOT_EQUALS)

        return self._token(TokenType.ASSIGNMENT)

    def _check_other(self, char):
        """Handles integers, keywords and identifiers."""
        if "0" <= char <= "9":
            digits = char
            while "0" <= self._peek_char() <= "9":
                digits += self._next_char()
            return self._token(TokenType.INT, digits)

        if not char.isalpha():
            raise LexicalFault("unknown character '{}'", char, line=self.line)

        word = char
        while self._peek_char().isalpha():
            word += self._next_char()

        if word in Lexer.KEYWORDS:
            return self._token(Lexer.KEYWORDS[word])
        if len(word) == 1 and "a" <= word <= "z":
            return self._token(TokenType.ID, word)

        raise LexicalFault("unknown token '{}' (identifiers are single lowercase letters)", word, line=self.line)

    def _read_token(self):
        char = self._next_char()
        while char.isspace():
            char = self._next_char()

        if char == Lexer.END_OF_TEXT:
            return self._token(TokenType.EOI)
        elif char in Lexer.SINGLES:
            return self._token(Lexer.SINGLES[char])
        elif char == "<":
            return self._check_smaller_equal()
        elif char == ">":
            return self._check_greater_equal()
        elif char == "=":
            return self._check_equals()
        return self._check_other(char)

    def peek(self):
        """Returns the next token without consuming it."""
        if self.current is None:
            self.current = self._read_token()
        return self.current

    def next(self):
        """Returns the next token and advances past it."""
        token = self.peek()
        self.current = None
        return token

    def __iter__(self):
        """Yields the remaining tokens, end of input included."""
        while True:
            token = self.next()
            yield token
            if token.type is TokenType.EOI:
                return
