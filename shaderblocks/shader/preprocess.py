"""
A restricted C-style preprocessor for GLSL.

The preprocessor tracks ``#define`` and ``#undef``, and evaluates ``#ifdef``,
``#ifndef``, ``#if``, ``#elif``, ``#else`` and ``#endif`` to drop the lines of
branches that are not taken. The define and undef lines themselves are kept,
so that the GPU compiler sees them too. Other directives (``#version``,
``#extension``, ``#pragma``) are passed through as normal lines.

The expressions of ``#if`` and ``#elif`` are evaluated with a small parser
that only knows boolean/integer literals, parentheses and the operators
``!``, ``&&``, ``||``, ``&``, ``|`` and ``^``. Anything else makes the
expression false.
"""

import re
import logging


logger = logging.getLogger("shaderblocks")

re_directive = re.compile(r"^\s*#\s*(\w+)\s*(.*?)\s*$")
re_define = re.compile(r"^(\w+)\s*(.*?)\s*$")
re_name = re.compile(r"\w+")
re_defined = re.compile(r"\bdefined\s*(?:\(\s*(\w+)\s*\)|\s(\w+))")
re_identifier = re.compile(r"\b[A-Za-z_]\w*\b")
re_allowed_chars = re.compile(r"^[a-zA-Z0-9 ()|&!^]*$")
re_token = re.compile(r"\s*(?:(\d+)|(&&|\|\||[!&|^()])|([A-Za-z_]\w*))")


class BranchContext:
    """The state of one level of the #if/#else stack.

    * hot: whether lines at this level are emitted (all ancestors are taken too).
    * ok: whether the current branch's own condition is true.
    * taken: whether any branch of this if-chain was taken so far.
    """

    __slots__ = ["hot", "ok", "taken"]

    def __init__(self, hot, ok):
        self.hot = hot
        self.ok = ok
        self.taken = ok


def preprocess(source):
    """Run the preprocessor over the given source (str or list of lines).

    Returns a tuple ``(lines, defines)``: the emitted lines, and a dict that
    maps the macros that are defined at the end of the source to their value
    (None for flag-only defines).
    """
    lines = source.splitlines() if isinstance(source, str) else list(source)

    # The defines and the stack are local, so concurrent calls do not interfere
    defines = {}
    stack = [BranchContext(True, True)]
    result = []

    for line in lines:
        context = stack[-1]
        match = re_directive.match(line)
        if not match:
            if context.hot:
                result.append(line)
            continue

        directive, value = match.group(1), match.group(2)

        if directive == "define":
            if context.hot:
                result.append(line)
                m = re_define.match(value)
                if m:
                    defines[m.group(1)] = m.group(2) or None
        elif directive == "undef":
            if context.hot:
                result.append(line)
                m = re_name.match(value)
                if m:
                    defines.pop(m.group(0), None)
        elif directive in ("ifdef", "ifndef", "if"):
            if directive == "if":
                ok = evaluate_if_expression(value, defines)
            else:
                m = re_name.match(value)
                ok = bool(m) and m.group(0) in defines
                if directive == "ifndef":
                    ok = bool(m) and not ok
            stack.append(BranchContext(context.hot and ok, ok))
        elif directive in ("else", "elif", "endif"):
            if len(stack) < 2:
                logger.debug(f"Ignoring unbalanced #{directive}: {line.strip()}")
                continue
            parent = stack[-2]
            if directive == "endif":
                stack.pop()
                continue
            if context.taken:
                context.ok = False
            elif directive == "else":
                context.ok = True
            else:
                context.ok = evaluate_if_expression(value, defines)
            context.taken = context.taken or context.ok
            context.hot = parent.hot and context.ok
        else:
            if context.hot:
                result.append(line)

    if len(stack) > 1:
        logger.debug(f"Source ends with {len(stack) - 1} unterminated #if block(s)")

    return result, defines


def evaluate_if_expression(expression, defines):
    """Evaluate the expression of an #if or #elif directive to a bool.

    Never raises: invalid expressions evaluate to False.
    """
    if not expression:
        return False

    def replace_defined(match):
        name = match.group(1) or match.group(2)
        if name in ("true", "false"):
            return name
        return "true" if name in defines else "false"

    def replace_identifier(match):
        name = match.group(0)
        if name in ("true", "false"):
            return name
        value = defines.get(name)
        return "false" if value is None else value

    expression = re_defined.sub(replace_defined, expression)
    expression = re_identifier.sub(replace_identifier, expression)

    # Limit the character set before evaluating
    if not re_allowed_chars.match(expression):
        logger.debug(f"Expression has disallowed characters: {expression!r}")
        return False

    try:
        tree = ExpressionParser(expression).parse()
        return bool(evaluate_tree(tree))
    except (ValueError, RecursionError) as err:
        logger.debug(f"Cannot evaluate expression {expression!r}: {err}")
        return False


def tokenize(expression):
    """Split an expression into a list of (kind, value) tuples."""
    tokens = []
    pos = 0
    expression = expression.rstrip()
    while pos < len(expression):
        match = re_token.match(expression, pos)
        if not match:
            raise ValueError(f"unexpected character at {pos}")
        number, op, name = match.groups()
        if number is not None:
            tokens.append(("num", int(number)))
        elif op is not None:
            tokens.append(("op", op))
        elif name in ("true", "false"):
            tokens.append(("num", name == "true"))
        else:
            raise ValueError(f"unknown identifier {name!r}")
        pos = match.end()
    return tokens


# Binary operators, from lowest to highest precedence
binary_operators = ["||", "&&", "|", "^", "&"]


class ExpressionParser:
    """Recursive descent parser that produces a tree of tuples.

    Nodes are ``("num", value)``, ``("!", node)`` and ``(op, left, right)``.
    """

    def __init__(self, expression):
        self._tokens = tokenize(expression)
        self._pos = 0

    def parse(self):
        if not self._tokens:
            raise ValueError("empty expression")
        tree = self._parse_binary(0)
        if self._pos != len(self._tokens):
            raise ValueError(f"unexpected token {self._tokens[self._pos][1]!r}")
        return tree

    def _peek(self):
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return (None, None)

    def _next(self):
        token = self._peek()
        if token[0] is None:
            raise ValueError("unexpected end of expression")
        self._pos += 1
        return token

    def _parse_binary(self, level):
        if level == len(binary_operators):
            return self._parse_unary()
        op = binary_operators[level]
        left = self._parse_binary(level + 1)
        while self._peek() == ("op", op):
            self._pos += 1
            right = self._parse_binary(level + 1)
            left = (op, left, right)
        return left

    def _parse_unary(self):
        kind, value = self._next()
        if kind == "num":
            return ("num", value)
        elif value == "!":
            return ("!", self._parse_unary())
        elif value == "(":
            node = self._parse_binary(0)
            if self._next() != ("op", ")"):
                raise ValueError("missing closing parenthesis")
            return node
        raise ValueError(f"unexpected token {value!r}")


def evaluate_tree(node):
    """Evaluate a tree produced by ``ExpressionParser``.

    Logical operators short-circuit and return an operand, bitwise operators
    work on ints (booleans count as 0 and 1).
    """
    kind = node[0]
    if kind == "num":
        return node[1]
    elif kind == "!":
        return not evaluate_tree(node[1])
    elif kind == "||":
        return evaluate_tree(node[1]) or evaluate_tree(node[2])
    elif kind == "&&":
        return evaluate_tree(node[1]) and evaluate_tree(node[2])

    left, right = int(evaluate_tree(node[1])), int(evaluate_tree(node[2]))
    if kind == "|":
        return left | right
    elif kind == "^":
        return left ^ right
    else:
        return left & right
