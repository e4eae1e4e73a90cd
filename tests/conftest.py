import io

import pytest

from mani.program   import Session
from mani.reporter  import Reporter


class Run:
    """Outcome of running one piece of Mani source through a fresh session."""

    def __init__(self, session, stdout, stderr, value):
        self.session    = session
        self.value      = value
        self.output     = stdout.getvalue()
        self.errors     = stderr.getvalue()

    @property
    def lines(self):
        return self.output.splitlines()

    @property
    def had_error(self):
        return self.session.had_error

    @property
    def had_runtime_error(self):
        return self.session.had_runtime_error

    @property
    def latest(self):
        return self.session.reporter.latest


@pytest.fixture
def mani():
    """Runs source text and returns a Run with captured output and errors."""
    def run(source, stdin="", file="test.mni"):
        stdout, stderr = io.StringIO(), io.StringIO()
        session = Session(
            Reporter(stream=stderr),
            stdout=stdout,
            stdin=io.StringIO(stdin),
        )
        value = session.run(source, file)
        return Run(session, stdout, stderr, value)

    return run


@pytest.fixture
def reporter():
    return Reporter(stream=io.StringIO())
