"""Tree-walking interpreter for Minimus syntax trees.

Minimus has a single type, the integer. There are no booleans: comparisons yield 1 or 0, and conditions treat any
non-zero value as true. Every node evaluates to an integer, statements included (they yield 0, except for if, which
yields the value of the branch it took, and assignment, which yields the assigned value so that a=b=c=12 works).

The variable table is the only mutable state. It is passed down through evaluation rather than stored globally, so
independent runs never share anything.
"""

import operator
from dataclasses import dataclass, field

from minimus.lang.error import InternalInvariantFault, SemanticFault
from minimus.lang.output import ConsoleSink
from minimus.lang.syntax import NodeType, Parser


def divide(left, right):
    """Integer division truncating toward zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


@dataclass
class Execution:
    """Result of a run: the final variable table and the value of the top-level node."""
    variables: dict = field(default_factory=dict)
    value: int = 0


class Interpreter:
    """Evaluates syntax trees, writing print output and the final variable table to sink."""
    OPERATIONS = {
        NodeType.LESS_THAN: lambda left, right: int(left < right),
        NodeType.GREATER_THAN: lambda left, right: int(left > right),
        NodeType.LESS_EQUAL_THAN: lambda left, right: int(left <= right),
        NodeType.GREATER_EQUAL_THAN: lambda left, right: int(left >= right),
        NodeType.EQUALS: lambda left, right: int(left == right),
        NodeType.NOT_EQUALS: lambda left, right: int(left != right),
        NodeType.ADDITION: operator.add,
        NodeType.SUBTRACTION: operator.sub,
        NodeType.MULTIPLY: operator.mul,
        NodeType.DIVIDE: divide,
    }

    def __init__(self, sink=None):
        self.sink = sink if sink is not None else ConsoleSink()

        self.handlers = {
            NodeType.ASSIGNMENT: self._handle_assignment,
            NodeType.IF: self._handle_if,
            NodeType.WHILE: self._handle_while,
            NodeType.SEQUENCE: self._handle_sequence,
            NodeType.EMPTY: lambda node, variables: 0,
            NodeType.PRINT: self._handle_print,
            NodeType.VARIABLE: self._handle_variable,
            NodeType.INTEGER: self._handle_integer,
            **{node_type: self._handle_operation for node_type in Interpreter.OPERATIONS},
        }

    def run(self, tree, variables=None):
        """Evaluates tree against variables (a new, empty table if None), then sends the table to the sink. Returns
        an Execution.
        """
        if variables is None:
            variables = {}

        value = self.evaluate(tree, variables)
        self.sink.snapshot(variables)
        return Execution(variables, value)

    def evaluate(self, node, variables):
        """Evaluates node and returns its integer value."""
        try:
            handler = self.handlers[node.type]
        except KeyError:
            raise InternalInvariantFault("unsupported node type '{}'", str(node.type), line=node.line)
        return handler(node, variables)

    def _handle_assignment(self, node, variables):
        value = self.evaluate(node.children[0], variables)
        variables[node.value] = value
        return value

    def _handle_if(self, node, variables):
        condition, then_branch, *else_branch = node.children
        if self.evaluate(condition, variables) != 0:
            return self.evaluate(then_branch, variables)
        elif else_branch:
            return self.evaluate(else_branch[0], variables)
        return 0

    def _handle_while(self, node, variables):
        condition, body = node.children
        while self.evaluate(condition, variables) != 0:
            self.evaluate(body, variables)
        return 0

    def _handle_sequence(self, node, variables):
        for child in node.children:
            self.evaluate(child, variables)
        return 0

    def _handle_print(self, node, variables):
        self.sink.emit(self.evaluate(node.children[0], variables))
        return 0

    def _handle_operation(self, node, variables):
        left = self.evaluate(node.children[0], variables)
        right = self.evaluate(node.children[1], variables)

        if node.type is NodeType.DIVIDE and right == 0:
            raise SemanticFault("division by zero", line=node.line)
        return Interpreter.OPERATIONS[node.type](left, right)

    @staticmethod
    def _handle_variable(node, variables):
        if node.value not in variables:
            raise SemanticFault("undefined variable '{}'", node.value, line=node.line)
        return variables[node.value]

    @staticmethod
    def _handle_integer(node, variables):
        try:
            return int(node.value)
        except ValueError:
            raise SemanticFault("integer literal with {} digits is too large", str(len(node.value)), line=node.line)


def interpret(program, sink=None, nesting_limit=None):
    """Parses and runs program text in one go. Returns an Execution."""
    tree = Parser(program, nesting_limit).parse()
    return Interpreter(sink).run(tree)
