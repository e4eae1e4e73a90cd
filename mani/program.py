import sys

from .interpreter   import Interpreter
from .lexer         import Lexer
from .parser        import Parser
from .reporter      import Reporter
from .resolver      import resolve

# each Mani call costs a handful of host frames
RECURSION_LIMIT = 10000

### SESSION CLASS ###

# owns one interpreter whose globals persist across run() calls
# run() goes lexer -> parser -> resolver -> interpreter and stops at the
# first stage that reported an error

class Session:
    def __init__(self, reporter = None, stdout = None, stdin = None,
                 halt_on_error = True):
        self.reporter       = reporter or Reporter()
        self.lexer          = Lexer(self.reporter)
        self.parser         = Parser(self.reporter)
        self.interpreter    = Interpreter(
            self.reporter,
            stdout          = stdout,
            stdin           = stdin,
            halt_on_error   = halt_on_error,
        )

        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)

    had_error           = property(lambda self: self.reporter.had_error)
    had_runtime_error   = property(lambda self: self.reporter.had_runtime_error)

    def parse(self, source, file = "REPL"):
        with self.reporter.checkpoint() as checkpoint:
            tokens      = self.lexer.scan(source, file)
            statements  = self.parser.parse(tokens)
            return statements if checkpoint else None

    def run(self, source, file = "REPL"):
        statements = self.parse(source, file)
        if statements is None:
            return None

        table = resolve(statements, self.reporter)
        if table is None:
            return None

        self.interpreter.resolve(table)
        return self.interpreter.interpret(statements)

    def reset(self):
        self.reporter.reset()
