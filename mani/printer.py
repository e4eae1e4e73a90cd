# --------------------------------------------------------------------
import decimal

from .ast import *

# ====================================================================
# Pretty printer: AST -> Mani source

ESCAPES = {
    '\\'    : '\\\\',
    '"'     : '\\"',
    '\n'    : '\\n',
    '\t'    : '\\t',
    '\r'    : '\\r',
    '\0'    : '\\0',
}

def format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text:
        # positional form, the lexer has no exponent syntax
        text = format(decimal.Decimal(text), "f")
    return text

class Printer:
    def __init__(self, indent: str = "    "):
        self.indent = indent

    def pformat(self, node) -> str:
        match node:
            case list():
                return "\n".join(self.for_statement(s) for s in node)
            case Statement():
                return self.for_statement(node)
            case _:
                return self.for_expression(node)

    # ----------------------------------------------------------------
    def for_literal(self, value) -> str:
        match value:
            case None:
                return "nil"
            case True:
                return "true"
            case False:
                return "false"
            case float():
                return format_number(value)
            case str():
                return '"' + "".join(ESCAPES.get(c, c) for c in value) + '"'

        raise ValueError(f"not a literal value: {value!r}")

    def for_params(self, params: list[Token]) -> str:
        return ", ".join(p.lexeme for p in params)

    def for_body(self, body: Block, depth: int) -> str:
        if not body:
            return "{ }"
        inner = "\n".join(self.for_statement(s, depth + 1) for s in body)
        return "{\n" + inner + "\n" + self.indent * depth + "}"

    def for_expression(self, expr: Expression, depth: int = 0) -> str:
        sub = lambda e: self.for_expression(e, depth)

        match expr:
            case Literal(value):
                return self.for_literal(value)

            case Variable(name):
                return name.lexeme

            case Assign(name, value):
                return f"{name.lexeme} = {sub(value)}"

            case CompoundAssign(target, operator, value):
                return f"{sub(target)} {operator.lexeme} {sub(value)}"

            case Unary(operator, right):
                operand = sub(right)
                # keep "- -x" from collapsing into "--x"
                if operand[:1] in ("-", "+"):
                    return f"{operator.lexeme} {operand}"
                return f"{operator.lexeme}{operand}"

            case Binary(left, operator, right) | Logical(left, operator, right):
                return f"{sub(left)} {operator.lexeme} {sub(right)}"

            case Call(callee, _, arguments):
                return f"{sub(callee)}({', '.join(sub(a) for a in arguments)})"

            case Get(obj, name):
                return f"{sub(obj)}.{name.lexeme}"

            case Set(obj, name, value):
                return f"{sub(obj)}.{name.lexeme} = {sub(value)}"

            case Index(obj, _, index):
                return f"{sub(obj)}[{sub(index)}]"

            case IndexSet(obj, _, index, value):
                return f"{sub(obj)}[{sub(index)}] = {sub(value)}"

            case This():
                return "this"

            case Super(_, method):
                return f"super.{method.lexeme}"

            case Lambda(_, params, body):
                return f"fn ({self.for_params(params)}) {self.for_body(body, depth)}"

            case Grouping(inner):
                return f"({sub(inner)})"

            case ArrayLiteral(_, elements):
                return f"[{', '.join(sub(e) for e in elements)}]"

            case Increment(target, operator, prefix):
                operand = sub(target)
                if prefix:
                    if operand[:1] in ("-", "+"):
                        return f"{operator.lexeme} {operand}"
                    return f"{operator.lexeme}{operand}"
                return f"{operand}{operator.lexeme}"

        raise ValueError(f"unknown expression: {expr!r}")

    def for_statement(self, stmt: Statement, depth: int = 0) -> str:
        pad = self.indent * depth
        sub = lambda e: self.for_expression(e, depth)

        match stmt:
            case ExprStatement(expression):
                return f"{pad}{sub(expression)};"

            case PrintStatement(_, value):
                return f"{pad}print {sub(value)};"

            case LetStatement(name, None):
                return f"{pad}let {name.lexeme};"

            case LetStatement(name, init):
                return f"{pad}let {name.lexeme} = {sub(init)};"

            case FunctionStatement(name, params, body):
                return (f"{pad}fn {name.lexeme}({self.for_params(params)}) "
                        f"{self.for_body(body, depth)}")

            case ClassStatement(name, superclass, methods):
                head = f"{pad}class {name.lexeme}"
                if superclass is not None:
                    head += f" < {superclass.name.lexeme}"
                if not methods:
                    return head + " { }"
                inner = "\n".join(
                    self.method(m, depth + 1) for m in methods
                )
                return f"{head} {{\n{inner}\n{pad}}}"

            case BlockStatement(statements):
                return pad + self.for_body(statements, depth)

            case IfStatement(condition, iftrue, iffalse):
                text = f"{pad}if ({sub(condition)}) {self.nested(iftrue, depth)}"
                if iffalse is not None:
                    text += f" else {self.nested(iffalse, depth)}"
                return text

            case WhileStatement(condition, body):
                return f"{pad}while ({sub(condition)}) {self.nested(body, depth)}"

            case BreakStatement():
                return f"{pad}break;"

            case ReturnStatement(_, None):
                return f"{pad}return;"

            case ReturnStatement(_, value):
                return f"{pad}return {sub(value)};"

        raise ValueError(f"unknown statement: {stmt!r}")

    def method(self, method: FunctionStatement, depth: int) -> str:
        pad = self.indent * depth
        return (f"{pad}{method.name.lexeme}({self.for_params(method.params)}) "
                f"{self.for_body(method.body, depth)}")

    def nested(self, stmt: Statement, depth: int) -> str:
        # statements in if/while position go on the same line as their head
        return self.for_statement(stmt, depth).lstrip()
