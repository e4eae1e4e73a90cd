# --------------------------------------------------------------------
import dataclasses as dc
import itertools as it

from typing import Optional as Opt

from .lexer import Token

# ====================================================================
# Abstract Syntax Tree

# every expression gets a fresh uid at construction, the resolver keys
# its scope-distance table by it
_uids = it.count()

def fresh_uid() -> int:
    return next(_uids)

# --------------------------------------------------------------------
@dc.dataclass
class Expression:
    uid: int = dc.field(
        kw_only = True, default_factory = fresh_uid, compare = False, repr = False,
    )

# --------------------------------------------------------------------
@dc.dataclass
class Literal(Expression):
    value: object

# --------------------------------------------------------------------
@dc.dataclass
class Variable(Expression):
    name: Token

# --------------------------------------------------------------------
@dc.dataclass
class Assign(Expression):
    name: Token
    value: Expression

# --------------------------------------------------------------------
@dc.dataclass
class CompoundAssign(Expression):
    target: Expression              # Variable | Get | Index
    operator: Token
    value: Expression

# --------------------------------------------------------------------
@dc.dataclass
class Unary(Expression):
    operator: Token
    right: Expression

# --------------------------------------------------------------------
@dc.dataclass
class Binary(Expression):
    left: Expression
    operator: Token
    right: Expression

# --------------------------------------------------------------------
@dc.dataclass
class Logical(Expression):
    left: Expression
    operator: Token
    right: Expression

# --------------------------------------------------------------------
@dc.dataclass
class Call(Expression):
    callee: Expression
    paren: Token
    arguments: list[Expression]

# --------------------------------------------------------------------
@dc.dataclass
class Get(Expression):
    object: Expression
    name: Token

# --------------------------------------------------------------------
@dc.dataclass
class Set(Expression):
    object: Expression
    name: Token
    value: Expression

# --------------------------------------------------------------------
@dc.dataclass
class Index(Expression):
    object: Expression
    bracket: Token
    index: Expression

# --------------------------------------------------------------------
@dc.dataclass
class IndexSet(Expression):
    object: Expression
    bracket: Token
    index: Expression
    value: Expression

# --------------------------------------------------------------------
@dc.dataclass
class This(Expression):
    keyword: Token

# --------------------------------------------------------------------
@dc.dataclass
class Super(Expression):
    keyword: Token
    method: Token

# --------------------------------------------------------------------
@dc.dataclass
class Lambda(Expression):
    keyword: Token
    params: list[Token]
    body: list["Statement"]

# --------------------------------------------------------------------
@dc.dataclass
class Grouping(Expression):
    expression: Expression

# --------------------------------------------------------------------
@dc.dataclass
class ArrayLiteral(Expression):
    bracket: Token
    elements: list[Expression]

# --------------------------------------------------------------------
@dc.dataclass
class Increment(Expression):
    target: Expression              # Variable | Get | Index
    operator: Token                 # ++ | --
    prefix: bool

# --------------------------------------------------------------------
class Statement:
    pass

# --------------------------------------------------------------------
@dc.dataclass
class ExprStatement(Statement):
    expression: Expression

# --------------------------------------------------------------------
@dc.dataclass
class PrintStatement(Statement):
    keyword: Token
    value: Expression

# --------------------------------------------------------------------
@dc.dataclass
class LetStatement(Statement):
    name: Token
    init: Opt[Expression]

# --------------------------------------------------------------------
@dc.dataclass
class FunctionStatement(Statement):
    name: Token
    params: list[Token]
    body: list[Statement]

# --------------------------------------------------------------------
@dc.dataclass
class ClassStatement(Statement):
    name: Token
    superclass: Opt[Variable]
    methods: list[FunctionStatement]

# --------------------------------------------------------------------
@dc.dataclass
class BlockStatement(Statement):
    statements: list[Statement]

# --------------------------------------------------------------------
@dc.dataclass
class IfStatement(Statement):
    condition: Expression
    iftrue: Statement
    iffalse: Opt[Statement]

# --------------------------------------------------------------------
@dc.dataclass
class WhileStatement(Statement):
    condition: Expression
    body: Statement

# --------------------------------------------------------------------
@dc.dataclass
class BreakStatement(Statement):
    keyword: Token

# --------------------------------------------------------------------
@dc.dataclass
class ReturnStatement(Statement):
    keyword: Token
    value: Opt[Expression]

# --------------------------------------------------------------------
Block   = list[Statement]
Program = Block
