import pytest

from mani.ast import *
from mani.lexer import Lexer
from mani.parser import Parser
from mani.resolver import Resolver, resolve


@pytest.fixture
def resolved(reporter):
    def run(source):
        statements = Parser(reporter).parse(Lexer(reporter).scan(source, "test.mni"))
        assert not reporter.had_error, reporter.latest
        return statements, Resolver(reporter).resolve(statements)

    return run


def errors(reporter):
    return [d.message for d in reporter.errors]


def test_globals_are_left_out_of_the_table(resolved):
    [let, stmt], table = resolved("let a = 1; print a;")
    assert stmt.value.uid not in table


def test_local_distances(resolved):
    source = "{ let a = 1; { let b = 2; print a + b; } }"
    [outer], table = resolved(source)
    inner = outer.statements[1]
    expr = inner.statements[1].value
    assert table[expr.left.uid] == 1
    assert table[expr.right.uid] == 0


def test_closure_reference_counts_function_scope(resolved):
    source = "fn make() { let i = 0; fn inc() { i = i + 1; return i; } return inc; }"
    [make], table = resolved(source)
    inc = make.body[1]
    assign = inc.body[0].expression
    assert table[assign.uid] == 1
    assert table[assign.value.left.uid] == 1


def test_method_this_and_super_distances(resolved):
    source = """
    class A { m() { return 1; } }
    class B < A { m() { return super.m() + this.n; } }
    """
    [_, b], table = resolved(source)
    ret = b.methods[0].body[0]
    sup = ret.value.left.callee
    this = ret.value.right.object
    # method scope -> this scope -> super scope
    assert table[this.uid] == 1
    assert table[sup.uid] == 2


def test_resolve_does_not_modify_the_tree(resolved):
    source = "{ let a = 1; print a; }"
    statements, _ = resolved(source)
    assert statements == [
        BlockStatement([
            LetStatement(statements[0].statements[0].name, Literal(1.0)),
            PrintStatement(statements[0].statements[1].keyword,
                           Variable(statements[0].statements[0].name)),
        ])
    ]


def test_read_in_own_initializer_local(resolved, reporter):
    resolved("{ let a = 1; { let a = a; } }")
    assert errors(reporter) == ["Can't read local variable in its own initializer."]


def test_read_in_own_initializer_global(resolved, reporter):
    resolved("let a = a;")
    assert errors(reporter) == ["Can't read local variable in its own initializer."]


def test_function_body_may_refer_to_its_own_binding(resolved, reporter):
    resolved("let f = fn (n) { return f; };")
    assert not reporter.had_error


def test_redeclaration_in_same_block(resolved, reporter):
    resolved("{ let a = 1; let a = 2; }")
    assert errors(reporter) == ["Already a variable with this name in this scope."]


def test_global_redeclaration_is_allowed(resolved, reporter):
    resolved("let a = 1; let a = 2;")
    assert not reporter.had_error


def test_duplicate_parameters(resolved, reporter):
    resolved("fn f(a, a) { }")
    assert errors(reporter) == ["Already a variable with this name in this scope."]


@pytest.mark.parametrize("source, message", [
    ("print this;", "Can't use 'this' outside of a class."),
    ("fn f() { return this; }", "Can't use 'this' outside of a class."),
    ("print super.x;", "Can't use 'super' outside of a class."),
    ("class A { m() { super.m(); } }", "Can't use 'super' in a class with no superclass."),
    ("class A < A { }", "A class can't inherit from itself."),
    ("return 1;", "Can't return from top-level code."),
    ("break;", "Can't use 'break' outside of a loop."),
    ("if (true) { break; }", "Can't use 'break' outside of a loop."),
    ("while (true) { fn f() { break; } }", "Can't use 'break' outside of a loop."),
])
def test_context_errors(resolved, reporter, source, message):
    resolved(source)
    assert errors(reporter) == [message]


def test_valid_contexts(resolved, reporter):
    resolved("""
    class A { init() { return; } m() { return this; } }
    class B < A { m() { return super.m(); } }
    while (true) { if (true) { break; } }
    fn f() { loop { break; } return 1; }
    """)
    assert not reporter.had_error, reporter.latest


def test_reports_every_problem_in_one_pass(resolved, reporter):
    resolved("break; return; print this;")
    assert len(reporter.errors) == 3


def test_resolve_helper_returns_none_on_error(reporter):
    statements = Parser(reporter).parse(Lexer(reporter).scan("break;", "t.mni"))
    assert resolve(statements, reporter) is None

    statements = Parser(reporter).parse(Lexer(reporter).scan("{ let a; a; }", "t.mni"))
    assert resolve(statements, reporter) is not None
