import dataclasses as dc
import enum
import re

import ply.lex

class TokenKind(enum.Enum):
    # Punctuation
    LEFT_PAREN      = enum.auto()
    RIGHT_PAREN     = enum.auto()
    LEFT_BRACE      = enum.auto()
    RIGHT_BRACE     = enum.auto()
    LEFT_SQUARE     = enum.auto()
    RIGHT_SQUARE    = enum.auto()
    COMMA           = enum.auto()
    DOT             = enum.auto()
    MINUS           = enum.auto()
    PLUS            = enum.auto()
    SEMICOLON       = enum.auto()
    SLASH           = enum.auto()
    STAR            = enum.auto()

    # One or two character operators
    BANG            = enum.auto()
    BANG_EQUAL      = enum.auto()
    GREATER         = enum.auto()
    GREATER_EQUAL   = enum.auto()
    LESS            = enum.auto()
    LESS_EQUAL      = enum.auto()
    EQUAL           = enum.auto()
    EQUAL_EQUAL     = enum.auto()
    VAR_ARROW       = enum.auto()

    PLUS_ASSIGN     = enum.auto()
    MINUS_ASSIGN    = enum.auto()
    STAR_ASSIGN     = enum.auto()
    SLASH_ASSIGN    = enum.auto()

    PLUS_PLUS       = enum.auto()
    MINUS_MINUS     = enum.auto()

    # Literals
    IDENTIFIER      = enum.auto()
    NUMBER          = enum.auto()
    STRING          = enum.auto()

    # Keywords
    AND             = enum.auto()
    CLASS           = enum.auto()
    ELSE            = enum.auto()
    FALSE           = enum.auto()
    FN              = enum.auto()
    FOR             = enum.auto()
    FUNC            = enum.auto()
    IF              = enum.auto()
    NIL             = enum.auto()
    OR              = enum.auto()
    PRINT           = enum.auto()
    RETURN          = enum.auto()
    SUPER           = enum.auto()
    THIS            = enum.auto()
    TRUE            = enum.auto()
    LET             = enum.auto()
    WHILE           = enum.auto()
    LOOP            = enum.auto()
    BREAK           = enum.auto()

    EOF             = enum.auto()

@dc.dataclass(frozen = True)
class Token:
    kind        : TokenKind
    lexeme      : str
    literal     : object    = None
    line        : int       = dc.field(default = 0,  compare = False)
    file        : str       = dc.field(default = "", compare = False)

    def __str__(self):
        return self.lexeme

class Lexer:
    keywords = {
        x: TokenKind[x.upper()] for x in (
            'and'      ,
            'class'    ,
            'else'     ,
            'false'    ,
            'fn'       ,
            'for'      ,
            'func'     ,
            'if'       ,
            'nil'      ,
            'or'       ,
            'print'    ,
            'return'   ,
            'super'    ,
            'this'     ,
            'true'     ,
            'let'      ,
            'while'    ,
            'loop'     ,
            'break'    ,
        )
    }

    escapes = {
        'n'     : '\n',
        't'     : '\t',
        'r'     : '\r',
        '"'     : '"',
        '\\'    : '\\',
        '0'     : '\0',
    }

    tokens = tuple(kind.name for kind in TokenKind if kind != TokenKind.EOF)

    t_LEFT_PAREN    = re.escape('(')
    t_RIGHT_PAREN   = re.escape(')')
    t_LEFT_BRACE    = re.escape('{')
    t_RIGHT_BRACE   = re.escape('}')
    t_LEFT_SQUARE   = re.escape('[')
    t_RIGHT_SQUARE  = re.escape(']')
    t_COMMA         = re.escape(',')
    t_DOT           = re.escape('.')
    t_MINUS         = re.escape('-')
    t_PLUS          = re.escape('+')
    t_SEMICOLON     = re.escape(';')
    t_SLASH         = re.escape('/')
    t_STAR          = re.escape('*')

    t_BANG          = re.escape('!')
    t_BANG_EQUAL    = re.escape('!=')
    t_GREATER       = re.escape('>')
    t_GREATER_EQUAL = re.escape('>=')
    t_LESS          = re.escape('<')
    t_LESS_EQUAL    = re.escape('<=')
    t_EQUAL         = re.escape('=')
    t_EQUAL_EQUAL   = re.escape('==')
    t_VAR_ARROW     = re.escape('->')

    t_PLUS_ASSIGN   = re.escape('+=')
    t_MINUS_ASSIGN  = re.escape('-=')
    t_STAR_ASSIGN   = re.escape('*=')
    t_SLASH_ASSIGN  = re.escape('/=')

    t_PLUS_PLUS     = re.escape('++')
    t_MINUS_MINUS   = re.escape('--')

    t_ignore = ' \t\r'          # Ignore all whitespaces but newlines

    def __init__(self, reporter):
        self.reporter = reporter
        self.file     = ""
        self.lexer    = ply.lex.lex(module = self)

    # function rules are tried in definition order, before the string rules

    def t_newline(self, t):
        r'\n+'
        t.lexer.lineno += len(t.value)

    def t_comment(self, t):
        r'//[^\n]*'

    def t_block_comment(self, t):
        r'/\*(.|\n)*?\*/'
        t.lexer.lineno += t.value.count('\n')

    def t_unterminated_comment(self, t):
        r'/\*(.|\n)*'
        self.reporter.error(t.lineno, f"in {self.file}", "Unterminated block comment.")
        t.lexer.lineno += t.value.count('\n')

    def t_STRING(self, t):
        r'"([^"\\]|\\(.|\n))*"'
        t.lexer.lineno += t.value.count('\n')
        return t

    def t_unterminated_string(self, t):
        r'"(.|\n)*'
        self.reporter.error(t.lineno, f"in {self.file}", "Unterminated string.")
        t.lexer.lineno += t.value.count('\n')

    def t_NUMBER(self, t):
        r'\d+(\.\d+)?'
        return t

    def t_IDENTIFIER(self, t):
        r'[a-zA-Z_][a-zA-Z0-9_]*'
        if t.value in self.keywords:
            t.type  = self.keywords[t.value].name
        return t

    def t_error(self, t):
        self.reporter.error(t.lineno, f"at '{t.value[0]}' {self.file}",
                            "Unexpected character.")
        t.lexer.skip(1)

    def unescape(self, tok):
        def replace(match):
            char = match.group(1)
            if char not in self.escapes:
                self.reporter.error(tok.lineno, f"at '{tok.value}' {self.file}",
                                    f"Invalid escape sequence '\\{char}'.")
                return char
            return self.escapes[char]

        return re.sub(r'\\(.|\n)', replace, tok.value[1:-1])

    def to_token(self, tok):
        kind = TokenKind[tok.type]

        match kind:
            case TokenKind.NUMBER:
                literal = float(tok.value)
            case TokenKind.STRING:
                literal = self.unescape(tok)
            case _:
                literal = None

        return Token(kind, tok.value, literal, tok.lineno, self.file)

    def scan(self, source, file = "REPL"):
        """
        source text -> list of tokens, always terminated by an EOF token
        """
        self.file           = file
        self.lexer.lineno   = 1
        self.lexer.input(source)

        tokens = [self.to_token(tok) for tok in self.lexer]
        tokens.append(Token(TokenKind.EOF, "", None, self.lexer.lineno, file))
        return tokens
