"""Minimus abstract syntax tree and predictive recursive-descent parser.

Formally, Minimus grammar can be defined as

```
<program>   ::= <statement> EOI
<statement> ::= "if" "(" <expr> ")" <statement> ["else" <statement>]  ; "else" binds to the nearest "if"
              | "while" "(" <expr> ")" <statement>
              | "{" { <statement> } "}"
              | "print" "(" <expr> ")" ";"
              | ";"
              | <expr> ";"
<expr>      ::= <id> "=" <expr>                                         ; right-associative: a=b=c=12
              | <test>
<test>      ::= <sum> [ <rel> <sum> ]                                   ; at most one comparison
<rel>       ::= "<" | ">" | "<=" | ">=" | "==" | "=/="
<sum>       ::= <factor> { ("+" | "-") <factor> }                      ; associating by left
<factor>    ::= <term> { ("*" | "/") <term> }                          ; associating by left
<term>      ::= <id> | <int> | "(" <expr> ")"
```

Exactly one token of lookahead is used to pick a production. Parentheses are not kept in the tree: the position of a
node alone enforces precedence.
"""

from contextlib import contextmanager
from enum import Enum

from minimus.lang.error import InternalInvariantFault, SyntaxFault
from minimus.lang.lexical import Lexer, TokenType


class NodeType(Enum):
    """Every kind of syntax tree node. Node types describe operations, not tokens."""
    ASSIGNMENT = "assignment"
    IF = "if"
    WHILE = "while"
    SEQUENCE = "sequence"
    EMPTY = "empty"
    PRINT = "print"

    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_EQUAL_THAN = "<="
    GREATER_EQUAL_THAN = ">="
    EQUALS = "=="
    NOT_EQUALS = "=/="

    ADDITION = "+"
    SUBTRACTION = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    VARIABLE = "variable"
    INTEGER = "integer"


RELATIONS = frozenset({
    NodeType.LESS_THAN, NodeType.GREATER_THAN, NodeType.LESS_EQUAL_THAN,
    NodeType.GREATER_EQUAL_THAN, NodeType.EQUALS, NodeType.NOT_EQUALS,
})
ARITHMETIC = frozenset({NodeType.ADDITION, NodeType.SUBTRACTION, NodeType.MULTIPLY, NodeType.DIVIDE})

# allowed child counts per node type (None: any number)
ARITY = {
    NodeType.ASSIGNMENT: {1},
    NodeType.IF: {2, 3},
    NodeType.WHILE: {2},
    NodeType.SEQUENCE: None,
    NodeType.EMPTY: {0},
    NodeType.PRINT: {1},
    NodeType.VARIABLE: {0},
    NodeType.INTEGER: {0},
    **{node_type: {2} for node_type in RELATIONS | ARITHMETIC},
}


class Node:
    """Syntax tree node: a node type, an optional value (variable name or integer digits) and its owned children.
    Nodes are built bottom-up by the Parser and are not modified afterwards.
    """

    def __init__(self, type, value=None, *children, line=None):
        self.type = type
        self.value = value
        self.children = tuple(children)
        self.line = line
        self.height = 1 + max((child.height for child in self.children), default=0)

        self._check()

    def _check(self):
        """Raises an InternalInvariantFault if this node's shape doesn't match its type."""
        if self.type not in ARITY:
            raise InternalInvariantFault("unknown node type '{}'", str(self.type), line=self.line)

        arity = ARITY[self.type]
        if arity is not None and len(self.children) not in arity:
            msg = "{} node expects {} children, got {}"
            counts = " or ".join(str(count) for count in sorted(arity))
            raise InternalInvariantFault(msg, (self.type.name, counts, str(len(self.children))), line=self.line)

        if self.type in (NodeType.ASSIGNMENT, NodeType.VARIABLE) and not self.value:
            raise InternalInvariantFault("{} node has no variable name", self.type.name, line=self.line)
        elif self.type is NodeType.INTEGER and not (self.value and self.value.isdigit()):
            raise InternalInvariantFault("INTEGER node has invalid literal '{}'", str(self.value), line=self.line)

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <TYPE>(value='<value>', nodes=[
            <TYPE>(nodes=[
                ...
                <TYPE>(value='<value>')  # <-- if there are no children
            ])
        ])
        """
        fields = [f"value='{self.value}'"] if self.value is not None else []
        result = f"{'    ' * indents}{self.type.name}(" + ", ".join(fields)

        if self.children:
            result += (", " if fields else "") + "nodes=["
            for child in self.children:
                result += "\n" + child.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        if self.value is not None:
            return f"Node({self.type.name}, '{self.value}', {list(self.children)})"
        return f"Node({self.type.name}, {list(self.children)})"

    def __str__(self):
        return self.display()

    def __eq__(self, other):
        """Structural equality; source lines are ignored."""
        return (isinstance(other, Node) and self.type is other.type and self.value == other.value
                and self.children == other.children)


class Parser:
    """Builds a syntax tree from a program string, pulling tokens from a Lexer one at a time."""
    NESTING_LIMIT = 100

    # a statement inside a block starts with one of these
    STATEMENT_STARTS = frozenset({
        TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.CURLY_OPEN, TokenType.ID, TokenType.SEMICOLON,
    })
    RELATIONS = {
        TokenType.LESS_THAN: NodeType.LESS_THAN,
        TokenType.GREATER_THAN: NodeType.GREATER_THAN,
        TokenType.LESS_EQUAL_THAN: NodeType.LESS_EQUAL_THAN,
        TokenType.GREATER_EQUAL_THAN: NodeType.GREATER_EQUAL_THAN,
        TokenType.EQUALS: NodeType.EQUALS,
        TokenType.NOT_EQUALS: NodeType.NOT_EQUALS,
    }
    SUMS = {TokenType.PLUS: NodeType.ADDITION, TokenType.MINUS: NodeType.SUBTRACTION}
    FACTORS = {TokenType.MULTIPLY: NodeType.MULTIPLY, TokenType.DIVIDE: NodeType.DIVIDE}

    def __init__(self, program, nesting_limit=None):
        self.lexer = Lexer(program)
        self.nesting_limit = Parser.NESTING_LIMIT if nesting_limit is None else nesting_limit
        self.depth = 0

    def parse(self):
        """Parses the whole program and returns the root Node."""
        statement = self._statement()

        token = self.lexer.next()
        if token.type is not TokenType.EOI:
            raise SyntaxFault("unexpected input after end of program: {}", str(token), line=token.line)
        return statement

    @contextmanager
    def _nesting(self):
        """Counts statement/expression nesting, raising a SyntaxFault past self.nesting_limit."""
        self.depth += 1
        try:
            if self.depth > self.nesting_limit:
                raise SyntaxFault("program nested deeper than {} levels", str(self.nesting_limit),
                                  line=self.lexer.line)
            yield
        finally:
            self.depth -= 1

    def _expect(self, token_type):
        """Consumes the next token, which must be of token_type."""
        token = self.lexer.next()
        if token.type is not token_type:
            raise SyntaxFault("'{}' expected, got {}", (token_type.value, str(token)), line=token.line)
        return token

    def _statement(self):
        with self._nesting():
            token = self.lexer.peek()

            if token.type is TokenType.IF:
                self.lexer.next()
                branches = [self._paren_expression(), self._statement()]
                if self.lexer.peek().type is TokenType.ELSE:  # optional else, binds to this (nearest) if
                    self.lexer.next()
                    branches.append(self._statement())
                return Node(NodeType.IF, None, *branches, line=token.line)

            elif token.type is TokenType.WHILE:
                self.lexer.next()
                return Node(NodeType.WHILE, None, self._paren_expression(), self._statement(), line=token.line)

            elif token.type is TokenType.CURLY_OPEN:
                self.lexer.next()
                statements = []
                while self.lexer.peek().type in Parser.STATEMENT_STARTS:
                    statements.append(self._statement())

                closing = self.lexer.next()
                if closing.type is not TokenType.CURLY_CLOSE:
                    raise SyntaxFault("'{}' or valid statement expected, got {}", ("}", str(closing)),
                                      line=closing.line)
                return Node(NodeType.SEQUENCE, None, *statements, line=token.line)

            elif token.type is TokenType.SEMICOLON:
                self.lexer.next()
                return Node(NodeType.EMPTY, line=token.line)

            elif token.type is TokenType.PRINT:
                self.lexer.next()
                to_print = self._paren_expression()
                self._expect(TokenType.SEMICOLON)
                return Node(NodeType.PRINT, None, to_print, line=token.line)

            expression = self._expression()  # evaluated only for its side effects
            self._expect(TokenType.SEMICOLON)
            return expression

    def _paren_expression(self):
        self._expect(TokenType.PAREN_OPEN)
        expression = self._expression()
        self._expect(TokenType.PAREN_CLOSE)
        return expression

    def _expression(self):
        """An expression is either an assignment or a test, and both can start with an id. So parse a test first: if
        it turns out to be a bare variable followed by '=', it was the target of an assignment.
        """
        with self._nesting():
            if self.lexer.peek().type is not TokenType.ID:
                return self._test()

            test = self._test()
            if test.type is NodeType.VARIABLE and self.lexer.peek().type is TokenType.ASSIGNMENT:
                self.lexer.next()
                return Node(NodeType.ASSIGNMENT, test.value, self._expression(), line=test.line)
            return test

    def _test(self):
        left = self._sum()

        token = self.lexer.peek()
        if token.type in Parser.RELATIONS:
            self.lexer.next()
            return Node(Parser.RELATIONS[token.type], None, left, self._sum(), line=token.line)
        return left

    def _sum(self):
        total = self._factor()
        while self.lexer.peek().type in Parser.SUMS:
            token = self.lexer.next()
            total = self._fold(Parser.SUMS[token.type], total, self._factor(), token.line)
        return total

    def _factor(self):
        product = self._term()
        while self.lexer.peek().type in Parser.FACTORS:
            token = self.lexer.next()
            product = self._fold(Parser.FACTORS[token.type], product, self._term(), token.line)
        return product

    def _fold(self, node_type, left, right, line):
        """Builds a left-leaning binary node, raising a SyntaxFault once the tree gets taller than self.nesting_limit.
        Operator chains are folded in a loop, so _nesting never sees them.
        """
        node = Node(node_type, None, left, right, line=line)
        if node.height > self.nesting_limit:
            raise SyntaxFault("program nested deeper than {} levels", str(self.nesting_limit), line=line)
        return node

    def _term(self):
        token = self.lexer.peek()

        if token.type is TokenType.ID:
            self.lexer.next()
            return Node(NodeType.VARIABLE, token.lexeme, line=token.line)
        elif token.type is TokenType.INT:
            self.lexer.next()
            return Node(NodeType.INTEGER, token.lexeme, line=token.line)
        elif token.type is not TokenType.PAREN_OPEN:
            raise SyntaxFault("expected id, integer or expression, got {}", str(token), line=token.line)
        return self._paren_expression()
