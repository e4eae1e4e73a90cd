# --------------------------------------------------------------------
import dataclasses as dc
import enum
import sys

from .ast       import *
from .lexer     import TokenKind as K
from .printer   import format_number
from .reporter  import Reporter
from .runtime   import *
from .          import natives

# ====================================================================
# Tree-walking evaluator

class Flow(enum.Enum):
    NORMAL  = 0
    BREAK   = 1
    RETURN  = 2

# how a statement finished: loops absorb BREAK, calls absorb RETURN
@dc.dataclass(frozen = True)
class Signal:
    flow    : Flow
    value   : object = None

NORMAL  = Signal(Flow.NORMAL)
BREAK   = Signal(Flow.BREAK)

ARITHMETIC = {
    K.PLUS_ASSIGN   : K.PLUS,
    K.MINUS_ASSIGN  : K.MINUS,
    K.STAR_ASSIGN   : K.STAR,
    K.SLASH_ASSIGN  : K.SLASH,
    K.PLUS_PLUS     : K.PLUS,
    K.MINUS_MINUS   : K.MINUS,
}

def is_truthy(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True

def is_equal(a, b) -> bool:
    if a is None or b is None:
        return a is b
    if type(a) is not type(b):
        return False
    if isinstance(a, list):
        return len(a) == len(b) and all(is_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (bool, float, str)):
        return a == b
    return a is b

def stringify(value) -> str:
    match value:
        case None:
            return "nil"
        case True:
            return "true"
        case False:
            return "false"
        case float():
            return format_number(value)
        case list():
            return "[" + ", ".join(stringify(v) for v in value) + "]"
        case _:
            return str(value)

def type_name(value) -> str:
    match value:
        case None:
            return "nil"
        case bool():
            return "a boolean"
        case float():
            return "a number"
        case str():
            return "a string"
        case list():
            return "an array"
        case ManiClass():
            return f"class {value.name}"
        case Callable():
            return "a function"
        case Instance():
            return f"an instance of {value.klass.name}"
    return type(value).__name__

class Interpreter:
    def __init__(
            self,
            reporter        : Reporter,
            stdout          = None,
            stdin           = None,
            halt_on_error   : bool = True,
    ):
        self.reporter       = reporter
        self.stdout         = stdout        # sys.stdout when None
        self.stdin          = stdin         # sys.stdin when None
        self.halt_on_error  = halt_on_error
        self.globals        = Environment()
        self.environment    = self.globals
        self.locals         = {}            # expression uid -> distance

        natives.install(self.globals)

    def resolve(self, table: dict[int, int]):
        self.locals.update(table)

    def interpret(self, statements: Program):
        """
        Runs the top-level statements in order. Returns the value of the
        last one when it is an expression statement, None otherwise.
        """
        result = None

        for stmt in statements:
            try:
                result = self.run_toplevel(stmt)
            except ManiRuntimeError as e:
                self.environment = self.globals
                self.reporter.runtime_error(e)
                result = None
                if self.halt_on_error:
                    break

        return result

    def run_toplevel(self, stmt: Statement):
        match stmt:
            case ExprStatement(expression):
                return self.evaluate(expression)

        signal = self.execute(stmt)
        assert signal.flow == Flow.NORMAL, "control flow escaped to top level"
        return None

    # ----------------------------------------------------------------
    # statements

    def execute(self, stmt: Statement) -> Signal:
        match stmt:
            case ExprStatement(expression):
                self.evaluate(expression)

            case PrintStatement(_, value):
                text = stringify(self.evaluate(value))
                print(text, file = self.stdout or sys.stdout, flush = True)

            case LetStatement(name, init):
                value = None if init is None else self.evaluate(init)
                self.environment.define(name.lexeme, value)

            case FunctionStatement(name):
                self.environment.define(name.lexeme, Function(stmt, self.environment))

            case ClassStatement():
                self.for_class(stmt)

            case BlockStatement(statements):
                return self.execute_block(statements, Environment(self.environment))

            case IfStatement(condition, iftrue, iffalse):
                if is_truthy(self.evaluate(condition)):
                    return self.execute(iftrue)
                if iffalse is not None:
                    return self.execute(iffalse)

            case WhileStatement(condition, body):
                while is_truthy(self.evaluate(condition)):
                    signal = self.execute(body)
                    if signal.flow == Flow.BREAK:
                        break
                    if signal.flow == Flow.RETURN:
                        return signal

            case BreakStatement():
                return BREAK

            case ReturnStatement(_, value):
                if value is None:
                    return Signal(Flow.RETURN)
                return Signal(Flow.RETURN, self.evaluate(value))

            case _:
                raise AssertionError(f"unknown statement: {stmt!r}")

        return NORMAL

    def execute_block(self, statements: Block, env: Environment) -> Signal:
        previous = self.environment
        try:
            self.environment = env
            for stmt in statements:
                signal = self.execute(stmt)
                if signal.flow != Flow.NORMAL:
                    return signal
            return NORMAL
        finally:
            self.environment = previous

    def call_body(self, body: Block, env: Environment):
        signal = self.execute_block(body, env)
        assert signal.flow != Flow.BREAK, "break crossed a function boundary"
        return signal.value

    def for_class(self, stmt: ClassStatement):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, ManiClass):
                raise ManiRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods = {
            method.name.lexeme: Function(
                method, self.environment,
                is_initializer = method.name.lexeme == "init",
            )
            for method in stmt.methods
        }

        klass = ManiClass(stmt.name.lexeme, superclass, methods)

        if superclass is not None:
            self.environment = self.environment.enclosing

        self.environment.assign(stmt.name, klass)

    # ----------------------------------------------------------------
    # variables

    def look_up(self, name: Token, expr: Expression):
        distance = self.locals.get(expr.uid)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def assign_variable(self, name: Token, expr: Expression, value):
        distance = self.locals.get(expr.uid)
        if distance is not None:
            self.environment.assign_at(distance, name, value)
        else:
            self.globals.assign(name, value)

    # ----------------------------------------------------------------
    # operators

    def check_number(self, operator: Token, *operands):
        if not all(isinstance(x, float) for x in operands):
            if len(operands) == 1:
                raise ManiRuntimeError(operator, "Operand must be a number.")
            raise ManiRuntimeError(operator, "Operands must be numbers.")

    def arithmetic(self, kind: K, operator: Token, left, right):
        match kind:
            case K.PLUS:
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) or isinstance(right, str):
                    return stringify(left) + stringify(right)
                raise ManiRuntimeError(operator,
                                       "Operands must be two numbers or strings.")

            case K.MINUS:
                self.check_number(operator, left, right)
                return left - right

            case K.STAR:
                self.check_number(operator, left, right)
                return left * right

            case K.SLASH:
                self.check_number(operator, left, right)
                if right == 0:
                    raise ManiRuntimeError(operator, "Division by zero.")
                return left / right

            case K.GREATER:
                self.check_number(operator, left, right)
                return left > right

            case K.GREATER_EQUAL:
                self.check_number(operator, left, right)
                return left >= right

            case K.LESS:
                self.check_number(operator, left, right)
                return left < right

            case K.LESS_EQUAL:
                self.check_number(operator, left, right)
                return left <= right

            case K.EQUAL_EQUAL:
                return is_equal(left, right)

            case K.BANG_EQUAL:
                return not is_equal(left, right)

        raise AssertionError(f"unknown operator: {operator.lexeme}")

    # ----------------------------------------------------------------
    # properties and indexing

    def instance_of(self, value, name: Token, action: str) -> Instance:
        if not isinstance(value, Instance):
            raise ManiRuntimeError(name,
                f"Only instances have properties, can't {action} "
                f"'{name.lexeme}' on {type_name(value)}.")
        return value

    def position(self, container, key, bracket: Token) -> int:
        if not isinstance(key, float) or not key.is_integer():
            raise ManiRuntimeError(bracket, "Index must be an integer.")
        if not 0 <= key < len(container):
            raise ManiRuntimeError(bracket,
                f"Index out of range: {format_number(key)} "
                f"(length {len(container)}).")
        return int(key)

    def index_get(self, container, key, bracket: Token):
        if not isinstance(container, (list, str)):
            raise ManiRuntimeError(bracket,
                f"Only arrays and strings can be indexed, got {type_name(container)}.")
        return container[self.position(container, key, bracket)]

    def index_set(self, container, key, value, bracket: Token):
        if not isinstance(container, list):
            raise ManiRuntimeError(bracket,
                f"Only arrays support index assignment, got {type_name(container)}.")
        container[self.position(container, key, bracket)] = value

    def update(self, target: Expression, compute):
        """
        One read and one write of an assignable target, evaluating its
        object and index once. Returns the (old, new) values.
        """
        match target:
            case Variable(name):
                old = self.look_up(name, target)
                new = compute(old)
                self.assign_variable(name, target, new)

            case Get(obj, name):
                instance = self.instance_of(self.evaluate(obj), name, "read")
                old = instance.get(name)
                new = compute(old)
                instance.set(name, new)

            case Index(obj, bracket, index):
                container   = self.evaluate(obj)
                key         = self.evaluate(index)
                old = self.index_get(container, key, bracket)
                new = compute(old)
                self.index_set(container, key, new, bracket)

            case _:
                raise AssertionError(f"not an assignable target: {target!r}")

        return old, new

    # ----------------------------------------------------------------
    # calls

    def invoke(self, callee, arguments: list, paren: Token):
        if not isinstance(callee, Callable):
            raise ManiRuntimeError(paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise ManiRuntimeError(paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        try:
            return callee.call(self, arguments)
        except NativeError as e:
            raise ManiRuntimeError(paren, str(e)) from e
        except RecursionError:
            raise ManiRuntimeError(paren, "Stack overflow.") from None

    # ----------------------------------------------------------------
    # expressions

    def evaluate(self, expr: Expression):
        match expr:
            case Literal(value):
                return value

            case Variable(name):
                return self.look_up(name, expr)

            case Assign(name, value):
                value = self.evaluate(value)
                self.assign_variable(name, expr, value)
                return value

            case CompoundAssign(target, operator, value):
                kind = ARITHMETIC[operator.kind]
                _, new = self.update(
                    target,
                    lambda old: self.arithmetic(kind, operator, old, self.evaluate(value)),
                )
                return new

            case Increment(target, operator, prefix):
                kind = ARITHMETIC[operator.kind]

                def step(old):
                    self.check_number(operator, old)
                    return self.arithmetic(kind, operator, old, 1.0)

                old, new = self.update(target, step)
                return new if prefix else old

            case Unary(operator, right):
                right = self.evaluate(right)
                match operator.kind:
                    case K.MINUS:
                        self.check_number(operator, right)
                        return -right
                    case K.BANG:
                        return not is_truthy(right)
                raise AssertionError(f"unknown operator: {operator.lexeme}")

            case Binary(left, operator, right):
                left    = self.evaluate(left)
                right   = self.evaluate(right)
                return self.arithmetic(operator.kind, operator, left, right)

            case Logical(left, operator, right):
                left = self.evaluate(left)
                if operator.kind == K.OR:
                    if is_truthy(left):
                        return left
                elif not is_truthy(left):
                    return left
                return self.evaluate(right)

            case Call(callee, paren, arguments):
                callee      = self.evaluate(callee)
                arguments   = [self.evaluate(a) for a in arguments]
                return self.invoke(callee, arguments, paren)

            case Get(obj, name):
                return self.instance_of(self.evaluate(obj), name, "read").get(name)

            case Set(obj, name, value):
                instance = self.instance_of(self.evaluate(obj), name, "set")
                value = self.evaluate(value)
                instance.set(name, value)
                return value

            case Index(obj, bracket, index):
                container = self.evaluate(obj)
                return self.index_get(container, self.evaluate(index), bracket)

            case IndexSet(obj, bracket, index, value):
                container   = self.evaluate(obj)
                key         = self.evaluate(index)
                value       = self.evaluate(value)
                self.index_set(container, key, value, bracket)
                return value

            case This(keyword):
                return self.look_up(keyword, expr)

            case Super(_, method):
                distance    = self.locals[expr.uid]
                superclass  = self.environment.get_at(distance, "super")
                instance    = self.environment.get_at(distance - 1, "this")

                found = superclass.find_method(method.lexeme)
                if found is None:
                    raise ManiRuntimeError(method,
                                           f"Undefined property '{method.lexeme}'.")
                return found.bind(instance)

            case Lambda():
                return Function(expr, self.environment)

            case Grouping(inner):
                return self.evaluate(inner)

            case ArrayLiteral(_, elements):
                return [self.evaluate(e) for e in elements]

        raise AssertionError(f"unknown expression: {expr!r}")
