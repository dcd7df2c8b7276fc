"""
Calculator tool - evaluates arithmetic expressions safely.

Expressions are parsed with ``ast`` and only numeric literals, arithmetic
operators, a few math functions and the constants ``pi`` and ``e`` are
accepted.
"""

from typing import Dict, Any
import ast
import math
import operator

from council.core.tool import Tool, ToolResult


_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS = {
    "sqrt": math.sqrt,
    "pow": math.pow,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "log": math.log,
    "abs": abs,
    "round": round,
}

_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

MAX_EXPONENT = 1000


def evaluate(expression: str) -> float:
    """Evaluate an arithmetic expression. Raises ValueError on anything else."""
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Invalid expression: {expression}") from e
    return _eval_node(tree.body)


def _eval_node(node: ast.AST) -> float:
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value

    if isinstance(node, ast.Name) and node.id in _CONSTANTS:
        return _CONSTANTS[node.id]

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, ast.Pow) and abs(right) > MAX_EXPONENT:
            raise ValueError("Exponent too large")
        if isinstance(node.op, (ast.Div, ast.FloorDiv, ast.Mod)) and right == 0:
            raise ValueError("Division by zero")
        return _BINARY_OPS[type(node.op)](left, right)

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))

    if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id in _FUNCTIONS:
        if node.keywords:
            raise ValueError("Keyword arguments are not supported")
        args = [_eval_node(arg) for arg in node.args]
        return _FUNCTIONS[node.func.id](*args)

    raise ValueError(f"Unsupported expression element: {type(node).__name__}")


class CalculatorTool(Tool):
    """Evaluates mathematical expressions."""

    name = "calculator"
    description = (
        "Evaluates mathematical expressions. Supports +, -, *, /, //, %, **, "
        "parentheses, and functions like sqrt, pow, sin, cos, tan, log."
    )
    parameters = {
        "type": "object",
        "properties": {
            "expression": {
                "type": "string",
                "description": 'The expression to evaluate, e.g. "2 + 2" or "sqrt(16)"',
            },
        },
        "required": ["expression"],
    }

    async def execute(self, params: Dict[str, Any]) -> ToolResult:
        expression = params.get("expression")
        if not expression or not isinstance(expression, str):
            return ToolResult.failure(self.name, "Expression parameter is required and cannot be empty")

        try:
            result = evaluate(expression)
        except (ValueError, TypeError, OverflowError) as e:
            return ToolResult.failure(self.name, f"Failed to evaluate expression: {e}")

        return ToolResult.ok(self.name, {"expression": expression, "result": result})
