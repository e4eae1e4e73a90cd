from .ast       import *
from .lexer     import Token, TokenKind as K
from .reporter  import Reporter

MAX_ARGUMENTS = 255

class ParseError(Exception):
    """
    unwinds the parser to the nearest statement boundary
    """

class Parser:
    # tokens that can start a new statement, used to resynchronise
    boundaries = (
        K.CLASS, K.FN, K.LET, K.FOR, K.IF, K.WHILE,
        K.LOOP, K.PRINT, K.RETURN, K.BREAK,
    )

    compound = {
        K.PLUS_ASSIGN   : K.PLUS,
        K.MINUS_ASSIGN  : K.MINUS,
        K.STAR_ASSIGN   : K.STAR,
        K.SLASH_ASSIGN  : K.SLASH,
    }

    def __init__(self, reporter: Reporter):
        self.reporter   = reporter
        self.tokens     = []
        self.current    = 0

    def parse(self, tokens: list[Token]) -> Program:
        self.tokens     = tokens
        self.current    = 0

        statements = []
        while not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # ----------------------------------------------------------------
    # token stream helpers

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def at_end(self) -> bool:
        return self.peek().kind == K.EOF

    def check(self, kind) -> bool:
        return self.peek().kind == kind

    def check_next(self, kind) -> bool:
        if self.current + 1 >= len(self.tokens):
            return False
        return self.tokens[self.current + 1].kind == kind

    def advance(self) -> Token:
        if not self.at_end():
            self.current += 1
        return self.previous()

    def match(self, *kinds) -> bool:
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def consume(self, kind, message) -> Token:
        if self.check(kind):
            return self.advance()
        raise self.error(self.peek(), message)

    def error(self, token, message) -> ParseError:
        self.reporter.token_error(token, message)
        return ParseError(message)

    def synchronize(self):
        self.advance()

        while not self.at_end():
            if self.previous().kind == K.SEMICOLON:
                return
            if self.peek().kind in self.boundaries:
                return
            self.advance()

    # ----------------------------------------------------------------
    # declarations

    def declaration(self):
        try:
            if self.match(K.CLASS):
                return self.class_declaration()
            if self.check(K.FN) and self.check_next(K.IDENTIFIER):
                self.advance()
                return self.function("function")
            if self.match(K.LET):
                return self.let_declaration()
            return self.statement()

        except ParseError:
            self.synchronize()
            return None

        except RecursionError:
            self.error(self.peek(), "Expression nesting too deep.")
            self.synchronize()
            return None

    def class_declaration(self):
        name        = self.consume(K.IDENTIFIER, "Expect class name.")
        superclass  = None

        if self.match(K.LESS):
            self.consume(K.IDENTIFIER, "Expect superclass name.")
            superclass = Variable(self.previous())

        self.consume(K.LEFT_BRACE, "Expect '{' before class body.")

        methods = []
        while not self.check(K.RIGHT_BRACE) and not self.at_end():
            methods.append(self.function("method"))

        self.consume(K.RIGHT_BRACE, "Expect '}' after class body.")
        return ClassStatement(name, superclass, methods)

    def function(self, kind):
        name    = self.consume(K.IDENTIFIER, f"Expect {kind} name.")
        params  = self.parameters(kind)
        self.consume(K.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return FunctionStatement(name, params, self.block())

    def parameters(self, kind):
        self.consume(K.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(K.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.error(self.peek(),
                               f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume(K.IDENTIFIER, "Expect parameter name."))
                if not self.match(K.COMMA):
                    break

        self.consume(K.RIGHT_PAREN, "Expect ')' after parameters.")
        return params

    def let_declaration(self):
        name = self.consume(K.IDENTIFIER, "Expect variable name.")

        init = None
        if self.match(K.EQUAL, K.VAR_ARROW):
            init = self.expression()

        self.consume(K.SEMICOLON, "Expect ';' after variable declaration.")
        return LetStatement(name, init)

    # ----------------------------------------------------------------
    # statements

    def statement(self):
        if self.match(K.PRINT):
            return self.print_statement()
        if self.match(K.LEFT_BRACE):
            return BlockStatement(self.block())
        if self.match(K.IF):
            return self.if_statement()
        if self.match(K.WHILE):
            return self.while_statement()
        if self.match(K.LOOP):
            return WhileStatement(Literal(True), self.statement())
        if self.match(K.FOR):
            return self.for_statement()
        if self.match(K.BREAK):
            keyword = self.previous()
            self.consume(K.SEMICOLON, "Expect ';' after 'break'.")
            return BreakStatement(keyword)
        if self.match(K.RETURN):
            return self.return_statement()
        return self.expression_statement()

    def print_statement(self):
        keyword = self.previous()
        value   = self.expression()
        self.consume(K.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(keyword, value)

    def block(self):
        statements = []

        while not self.check(K.RIGHT_BRACE) and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(K.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def if_statement(self):
        self.consume(K.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(K.RIGHT_PAREN, "Expect ')' after if condition.")

        iftrue  = self.statement()
        iffalse = self.statement() if self.match(K.ELSE) else None
        return IfStatement(condition, iftrue, iffalse)

    def while_statement(self):
        self.consume(K.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(K.RIGHT_PAREN, "Expect ')' after condition.")
        return WhileStatement(condition, self.statement())

    def for_statement(self):
        self.consume(K.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(K.SEMICOLON):
            init = None
        elif self.match(K.LET):
            init = self.let_declaration()
        else:
            init = self.expression_statement()

        condition = None
        if not self.check(K.SEMICOLON):
            condition = self.expression()
        self.consume(K.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(K.RIGHT_PAREN):
            increment = self.expression()
        self.consume(K.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        # for (init; cond; incr) body
        #   => { init; while (cond) { body; incr; } }
        if increment is not None:
            body = BlockStatement([body, ExprStatement(increment)])

        body = WhileStatement(condition or Literal(True), body)

        if init is not None:
            body = BlockStatement([init, body])

        return body

    def return_statement(self):
        keyword = self.previous()

        value = None
        if not self.check(K.SEMICOLON):
            value = self.expression()

        self.consume(K.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatement(keyword, value)

    def expression_statement(self):
        expr = self.expression()
        self.consume(K.SEMICOLON, "Expect ';' after expression.")
        return ExprStatement(expr)

    # ----------------------------------------------------------------
    # expressions, lowest precedence first

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.logic_or()

        if self.match(K.EQUAL):
            equals  = self.previous()
            value   = self.assignment()

            match expr:
                case Variable(name):
                    return Assign(name, value)
                case Get(obj, name):
                    return Set(obj, name, value)
                case Index(obj, bracket, index):
                    return IndexSet(obj, bracket, index, value)

            self.error(equals, "Invalid assignment target.")

        elif self.match(*self.compound):
            operator    = self.previous()
            value       = self.assignment()

            if isinstance(expr, (Variable, Get, Index)):
                return CompoundAssign(expr, operator, value)

            self.error(operator, "Invalid assignment target.")

        return expr

    def logic_or(self):
        expr = self.logic_and()

        while self.match(K.OR):
            operator = self.previous()
            expr = Logical(expr, operator, self.logic_and())

        return expr

    def logic_and(self):
        expr = self.equality()

        while self.match(K.AND):
            operator = self.previous()
            expr = Logical(expr, operator, self.equality())

        return expr

    def binary(self, operand, *operators):
        expr = operand()

        while self.match(*operators):
            operator = self.previous()
            expr = Binary(expr, operator, operand())

        return expr

    def equality(self):
        return self.binary(self.comparison, K.BANG_EQUAL, K.EQUAL_EQUAL)

    def comparison(self):
        return self.binary(self.term,
                           K.GREATER, K.GREATER_EQUAL, K.LESS, K.LESS_EQUAL)

    def term(self):
        return self.binary(self.factor, K.MINUS, K.PLUS)

    def factor(self):
        return self.binary(self.unary, K.SLASH, K.STAR)

    def unary(self):
        if self.match(K.BANG, K.MINUS):
            operator = self.previous()
            return Unary(operator, self.unary())

        if self.match(K.PLUS_PLUS, K.MINUS_MINUS):
            operator    = self.previous()
            target      = self.unary()
            return self.increment(target, operator, prefix = True)

        return self.postfix()

    def postfix(self):
        expr = self.call()

        if self.match(K.PLUS_PLUS, K.MINUS_MINUS):
            return self.increment(expr, self.previous(), prefix = False)

        return expr

    def increment(self, target, operator, prefix):
        if not isinstance(target, (Variable, Get, Index)):
            self.error(operator, "Invalid increment target.")
            return target
        return Increment(target, operator, prefix)

    def call(self):
        expr = self.primary()

        while True:
            if self.match(K.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(K.DOT):
                name = self.consume(K.IDENTIFIER, "Expect property name after '.'.")
                expr = Get(expr, name)
            elif self.match(K.LEFT_SQUARE):
                bracket = self.previous()
                index   = self.expression()
                self.consume(K.RIGHT_SQUARE, "Expect ']' after index.")
                expr = Index(expr, bracket, index)
            else:
                break

        return expr

    def arguments(self, closing, what):
        arguments = []

        if not self.check(closing):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.peek(),
                               f"Can't have more than {MAX_ARGUMENTS} {what}.")
                arguments.append(self.expression())
                if not self.match(K.COMMA):
                    break

        return arguments

    def finish_call(self, callee):
        arguments = self.arguments(K.RIGHT_PAREN, "arguments")
        paren = self.consume(K.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, arguments)

    def primary(self):
        if self.match(K.FALSE):
            return Literal(False)
        if self.match(K.TRUE):
            return Literal(True)
        if self.match(K.NIL):
            return Literal(None)

        if self.match(K.NUMBER, K.STRING):
            return Literal(self.previous().literal)

        if self.match(K.THIS):
            return This(self.previous())

        if self.match(K.SUPER):
            keyword = self.previous()
            self.consume(K.DOT, "Expect '.' after 'super'.")
            method = self.consume(K.IDENTIFIER, "Expect superclass method name.")
            return Super(keyword, method)

        if self.match(K.IDENTIFIER):
            return Variable(self.previous())

        if self.match(K.LEFT_PAREN):
            expr = self.expression()
            self.consume(K.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        if self.match(K.LEFT_SQUARE):
            bracket     = self.previous()
            elements    = self.arguments(K.RIGHT_SQUARE, "array elements")
            self.consume(K.RIGHT_SQUARE, "Expect ']' after array elements.")
            return ArrayLiteral(bracket, elements)

        if self.match(K.FN):
            keyword = self.previous()
            params  = self.parameters("function")
            self.consume(K.LEFT_BRACE, "Expect '{' before function body.")
            return Lambda(keyword, params, self.block())

        if self.check(K.FUNC):
            raise self.error(self.peek(), "'func' is a reserved word.")

        raise self.error(self.peek(), "Expect expression.")
