# --------------------------------------------------------------------
import contextlib as cl
import enum

from .ast       import *
from .reporter  import Reporter

# ====================================================================
# Static scope resolution

class FunctionKind(enum.Enum):
    NONE        = 0
    FUNCTION    = 1
    METHOD      = 2

class ClassKind(enum.Enum):
    NONE        = 0
    CLASS       = 1
    SUBCLASS    = 2

class Resolver:
    """
    Walks the tree once, mirroring the scopes the interpreter will
    create, and records for every local reference how many environments
    separate it from its declaration. References that no enclosing
    scope declares are left out of the table and looked up as globals.

    Scope frames map a name to False while its initializer is being
    resolved and to True once it is usable.
    """
    def __init__(self, reporter: Reporter):
        self.reporter   = reporter
        self.scopes     = []            # list[dict[str, bool]]
        self.globals    = {}            # top-level names, same states
        self.locals     = {}            # expression uid -> distance
        self.function   = FunctionKind.NONE
        self.klass      = ClassKind.NONE
        self.loops      = 0

    def report(self, token: Token, msg: str):
        self.reporter.token_error(token, msg)

    @cl.contextmanager
    def in_scope(self, **bound):
        self.scopes.append(dict.fromkeys(bound, True))
        try:
            yield self
        finally:
            self.scopes.pop()

    @cl.contextmanager
    def in_loop(self):
        self.loops += 1
        try:
            yield self
        finally:
            self.loops -= 1

    @cl.contextmanager
    def in_function(self, kind: FunctionKind):
        # a function body starts outside of any loop
        enclosing = self.function, self.loops
        self.function, self.loops = kind, 0
        try:
            with self.in_scope():
                yield self
        finally:
            self.function, self.loops = enclosing

    @cl.contextmanager
    def in_class(self, kind: ClassKind):
        enclosing = self.klass
        self.klass = kind
        try:
            yield self
        finally:
            self.klass = enclosing

    def declare(self, name: Token):
        if not self.scopes:
            self.globals[name.lexeme] = False
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.report(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name: Token):
        scope = self.scopes[-1] if self.scopes else self.globals
        scope[name.lexeme] = True

    def resolve_local(self, expr: Expression, name: str):
        for distance, scope in enumerate(reversed(self.scopes)):
            if name in scope:
                self.locals[expr.uid] = distance
                return

    # ----------------------------------------------------------------
    def for_expression(self, expr: Expression):
        match expr:
            case Literal(_):
                pass

            case Variable(name):
                scope = self.scopes[-1] if self.scopes else self.globals
                if scope.get(name.lexeme) is False:
                    self.report(name, "Can't read local variable in its own initializer.")
                self.resolve_local(expr, name.lexeme)

            case Assign(name, value):
                self.for_expression(value)
                self.resolve_local(expr, name.lexeme)

            case CompoundAssign(target, _, value):
                self.for_expression(target)
                self.for_expression(value)

            case Unary(_, right):
                self.for_expression(right)

            case Binary(left, _, right) | Logical(left, _, right):
                self.for_expression(left)
                self.for_expression(right)

            case Call(callee, _, arguments):
                self.for_expression(callee)
                for argument in arguments:
                    self.for_expression(argument)

            case Get(obj, _):
                self.for_expression(obj)

            case Set(obj, _, value):
                self.for_expression(value)
                self.for_expression(obj)

            case Index(obj, _, index):
                self.for_expression(obj)
                self.for_expression(index)

            case IndexSet(obj, _, index, value):
                self.for_expression(obj)
                self.for_expression(index)
                self.for_expression(value)

            case This(keyword):
                if self.klass == ClassKind.NONE:
                    self.report(keyword, "Can't use 'this' outside of a class.")
                    return
                self.resolve_local(expr, "this")

            case Super(keyword, _):
                if self.klass == ClassKind.NONE:
                    self.report(keyword, "Can't use 'super' outside of a class.")
                elif self.klass != ClassKind.SUBCLASS:
                    self.report(keyword, "Can't use 'super' in a class with no superclass.")
                self.resolve_local(expr, "super")

            case Lambda(_, params, body):
                self.for_function(params, body, FunctionKind.FUNCTION)

            case Grouping(inner):
                self.for_expression(inner)

            case ArrayLiteral(_, elements):
                for element in elements:
                    self.for_expression(element)

            case Increment(target, _, _):
                self.for_expression(target)

            case _:
                raise AssertionError(f"unknown expression: {expr!r}")

    def for_function(self, params: list[Token], body: Block, kind: FunctionKind):
        with self.in_function(kind):
            for param in params:
                self.declare(param)
                self.define(param)
            self.for_statements(body)

    def for_class(self, stmt: ClassStatement):
        name, superclass, methods = stmt.name, stmt.superclass, stmt.methods

        self.declare(name)
        self.define(name)

        kind = ClassKind.CLASS
        if superclass is not None:
            kind = ClassKind.SUBCLASS
            if superclass.name.lexeme == name.lexeme:
                self.report(superclass.name, "A class can't inherit from itself.")
            self.for_expression(superclass)

        with self.in_class(kind), cl.ExitStack() as stack:
            if superclass is not None:
                stack.enter_context(self.in_scope(super = True))

            with self.in_scope(this = True):
                for method in methods:
                    self.for_function(method.params, method.body, FunctionKind.METHOD)

    def for_statement(self, stmt: Statement):
        match stmt:
            case ExprStatement(expression):
                self.for_expression(expression)

            case PrintStatement(_, value):
                self.for_expression(value)

            case LetStatement(name, init):
                self.declare(name)
                if init is not None:
                    self.for_expression(init)
                self.define(name)

            case FunctionStatement(name, params, body):
                self.declare(name)
                self.define(name)
                self.for_function(params, body, FunctionKind.FUNCTION)

            case ClassStatement():
                self.for_class(stmt)

            case BlockStatement(statements):
                with self.in_scope():
                    self.for_statements(statements)

            case IfStatement(condition, iftrue, iffalse):
                self.for_expression(condition)
                self.for_statement(iftrue)
                if iffalse is not None:
                    self.for_statement(iffalse)

            case WhileStatement(condition, body):
                self.for_expression(condition)
                with self.in_loop():
                    self.for_statement(body)

            case BreakStatement(keyword):
                if self.loops == 0:
                    self.report(keyword, "Can't use 'break' outside of a loop.")

            case ReturnStatement(keyword, value):
                if self.function == FunctionKind.NONE:
                    self.report(keyword, "Can't return from top-level code.")

                if value is not None:
                    self.for_expression(value)

            case _:
                raise AssertionError(f"unknown statement: {stmt!r}")

    def for_statements(self, statements: Block):
        for stmt in statements:
            self.for_statement(stmt)

    def resolve(self, statements: Program) -> dict[int, int]:
        self.for_statements(statements)
        return self.locals

# --------------------------------------------------------------------
def resolve(statements: Program, reporter: Reporter) -> dict[int, int] | None:
    with reporter.checkpoint() as checkpoint:
        table = Resolver(reporter).resolve(statements)
        return table if checkpoint else None
