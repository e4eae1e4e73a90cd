import contextlib as cl
import dataclasses as dc
import sys

from .lexer import TokenKind

class Diagnostic():
    """
    one reported problem, kept so callers can inspect it after a run
    """
    def __init__(self, kind, message, line = None, where = None):
        self.kind       = kind      # "error" | "runtime"
        self.message    = message   # str
        self.line       = line      # int | None
        self.where      = where     # str | None

    def __repr__(self):
        if self.line is None:
            return self.message
        if self.kind == "runtime":
            return f"{self.message}\n[line {self.line}] at {self.where}"
        return f"[line {self.line}] Error {self.where} : {self.message}"

@dc.dataclass
class Checkpoint:
    reporter    : "Reporter"
    start       : int

    def __bool__(self):
        return len(self.reporter.errors) == self.start

class Reporter():
    """
    collects errors from every stage of the pipeline
    """
    def __init__(self, stream = None):
        self.stream             = stream    # file-like, stderr when None
        self.errors             = []
        self.had_error          = False
        self.had_runtime_error  = False
        self.latest             = None

    def emit(self, diagnostic):
        self.errors.append(diagnostic)
        self.latest = str(diagnostic)
        print(self.latest, file = self.stream or sys.stderr)

    def __call__(self, message):
        self.emit(Diagnostic("error", message))
        self.had_error = True

    def error(self, line, where, message):
        self.emit(Diagnostic("error", message, line = line, where = where))
        self.had_error = True

    def token_error(self, token, message):
        if token.kind == TokenKind.EOF:
            self.error(token.line, f"at end of {token.file}", message)
        else:
            self.error(token.line, f"at '{token.lexeme}' {token.file}", message)

    def runtime_error(self, error):
        self.emit(Diagnostic("runtime", error.message,
                             line   = error.token.line,
                             where  = error.token.file))
        self.had_runtime_error = True

    def reset(self):
        self.had_error          = False
        self.had_runtime_error  = False

    @cl.contextmanager
    def checkpoint(self):
        yield Checkpoint(self, len(self.errors))
