# --------------------------------------------------------------------
import abc

from .ast   import FunctionStatement, Lambda
from .lexer import Token

# ====================================================================
# Runtime data model

class ManiRuntimeError(Exception):
    """
    raised while evaluating, reported once per top-level statement
    """
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token      = token
        self.message    = message

class NativeError(Exception):
    """
    raised by native functions, re-raised at the call site with its token
    """

# --------------------------------------------------------------------
class Environment:
    def __init__(self, enclosing: "Environment | None" = None):
        self.values     = {}
        self.enclosing  = enclosing

    def define(self, name: str, value):
        self.values[name] = value

    def get(self, name: Token):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing

        raise ManiRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing

        raise ManiRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> "Environment":
        env = self
        for _ in range(distance):
            env = env.enclosing
        return env

    # a resolved distance always finds its name, a miss here is a resolver bug
    def get_at(self, distance: int, name: str):
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value):
        self.ancestor(distance).values[name.lexeme] = value

# --------------------------------------------------------------------
class Callable(abc.ABC):
    @abc.abstractmethod
    def arity(self) -> int:
        ...

    @abc.abstractmethod
    def call(self, interpreter, arguments: list):
        ...

# --------------------------------------------------------------------
class Function(Callable):
    def __init__(
            self,
            declaration     : FunctionStatement | Lambda,
            closure         : Environment,
            is_initializer  : bool = False,
    ):
        self.declaration    = declaration
        self.closure        = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        match self.declaration:
            case FunctionStatement(name):
                return name.lexeme
            case _:
                return "anonymous"

    def bind(self, instance: "Instance") -> "Function":
        env = Environment(self.closure)
        env.define("this", instance)
        return Function(self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter, arguments: list):
        env = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            env.define(param.lexeme, argument)

        value = interpreter.call_body(self.declaration.body, env)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return value

    def __str__(self):
        return f"<fn {self.name}>"

# --------------------------------------------------------------------
class NativeFunction(Callable):
    def __init__(self, name: str, arity: int, fn):
        self.name   = name
        self._arity = arity
        self.fn     = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter, arguments: list):
        return self.fn(interpreter, *arguments)

    def __str__(self):
        return f"<native fn {self.name}>"

# --------------------------------------------------------------------
class ManiClass(Callable):
    def __init__(
            self,
            name        : str,
            superclass  : "ManiClass | None",
            methods     : dict[str, Function],
    ):
        self.name       = name
        self.superclass = superclass
        self.methods    = methods

    def find_method(self, name: str) -> Function | None:
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        init = self.find_method("init")
        return 0 if init is None else init.arity()

    def call(self, interpreter, arguments: list):
        instance = Instance(self)

        init = self.find_method("init")
        if init is not None:
            init.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return self.name

# --------------------------------------------------------------------
class Instance:
    def __init__(self, klass: ManiClass):
        self.klass  = klass
        self.fields = {}

    def get(self, name: Token):
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise ManiRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"
