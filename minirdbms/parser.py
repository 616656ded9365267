"""
Tokenizer and parser for the SQL-like command language.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from .errors import QuerySyntaxError, UnknownCommandError
from .statements import (
    Begin, ColumnRef, Commit, Condition, CreateTable, Delete, Insert,
    JoinClause, Rollback, Select, Statement, Update,
)
from .types import Column, DataType

TOKEN_PATTERN = re.compile(r"""
    (?P<ws>\s+)
  | (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
  | (?P<number>[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<punct>[(),=.*;])
  | (?P<word>[^\s(),=;'"]+)
""", re.VERBOSE)

LEADING_KEYWORD = re.compile(
    r'^(CREATE\s+TABLE|INSERT\s+INTO|SELECT|UPDATE|DELETE|BEGIN|COMMIT|ROLLBACK)\b',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    value: str
    start: int
    end: int

    def is_keyword(self, word: str) -> bool:
        return self.kind == 'ident' and self.text.upper() == word

    def is_punct(self, char: str) -> bool:
        return self.kind == 'punct' and self.text == char


def tokenize(query: str) -> List[Token]:
    """Split a command into tokens; quoted strings come back unquoted in ``value``."""
    tokens = []
    pos = 0
    while pos < len(query):
        match = TOKEN_PATTERN.match(query, pos)
        if not match and query[pos] in "'\"":
            raise QuerySyntaxError(f"Unterminated string literal at position {pos}")
        if not match:
            raise QuerySyntaxError(f"Unexpected character '{query[pos]}' at position {pos}")
        kind = match.lastgroup
        text = match.group()
        if kind != 'ws':
            value = text
            if kind == 'string':
                quote = text[0]
                value = text[1:-1].replace(quote * 2, quote)
            tokens.append(Token(kind, text, value, match.start(), match.end()))
        pos = match.end()
    return tokens


def _ends_list_item(token: Token) -> bool:
    return token.is_punct(',') or token.is_punct(')')


def normalize(query: str) -> str:
    """Collapse runs of whitespace and drop a trailing semicolon."""
    query = re.sub(r'\s+', ' ', query).strip()
    if query.endswith(';'):
        query = query[:-1].rstrip()
    return query


class QueryParser:
    """Parses SQL-like queries into typed statements."""

    def parse(self, query: str) -> Statement:
        """Parse one command. Raises UnknownCommandError or QuerySyntaxError."""
        query = normalize(query)
        leading = LEADING_KEYWORD.match(query)
        if not leading:
            raise UnknownCommandError()
        keyword = re.sub(r'\s+', ' ', leading.group(1)).upper()

        return _Parser(query, tokenize(query)).parse(keyword)


class _Parser:
    """Recursive-descent parser over a token list for a single command."""

    def __init__(self, query: str, tokens: List[Token]):
        self.query = query
        self.tokens = tokens
        self.pos = 0
        self.statement_name = "query"

    # ---- token helpers ----

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise QuerySyntaxError(f"Unexpected end of {self.statement_name}")
        self.pos += 1
        return token

    def _accept_keyword(self, word: str) -> bool:
        token = self._peek()
        if token is not None and token.is_keyword(word):
            self.pos += 1
            return True
        return False

    def _expect_keyword(self, word: str) -> None:
        if not self._accept_keyword(word):
            raise self._error(f"expected {word}")

    def _expect_punct(self, char: str) -> None:
        token = self._peek()
        if token is None or not token.is_punct(char):
            raise self._error(f"expected '{char}'")
        self.pos += 1

    def _expect_identifier(self, what: str) -> str:
        token = self._peek()
        if token is None or token.kind != 'ident':
            raise self._error(f"expected {what}")
        self.pos += 1
        return token.text

    def _expect_end(self) -> None:
        token = self._peek()
        if token is not None:
            raise self._error(f"unexpected '{token.text}'")

    def _error(self, detail: str) -> QuerySyntaxError:
        return QuerySyntaxError(f"Syntax Error in {self.statement_name}: {detail}")

    # ---- grammar ----

    def parse(self, keyword: str) -> Statement:
        self.statement_name = keyword
        handlers = {
            'CREATE TABLE': self._parse_create_table,
            'INSERT INTO': self._parse_insert,
            'SELECT': self._parse_select,
            'UPDATE': self._parse_update,
            'DELETE': self._parse_delete,
            'BEGIN': lambda: self._parse_bare(Begin),
            'COMMIT': lambda: self._parse_bare(Commit),
            'ROLLBACK': lambda: self._parse_bare(Rollback),
        }
        return handlers[keyword]()

    def _parse_bare(self, statement_class) -> Statement:
        self._advance()
        if self._peek() is not None:
            raise UnknownCommandError()
        return statement_class()

    def _parse_create_table(self) -> CreateTable:
        self._expect_keyword('CREATE')
        self._expect_keyword('TABLE')
        table_name = self._expect_identifier("table name")
        self._expect_punct('(')

        columns = [self._parse_column_def()]
        while self._peek() is not None and self._peek().is_punct(','):
            self._advance()
            columns.append(self._parse_column_def())
        self._expect_punct(')')
        self._expect_end()

        seen = set()
        for col in columns:
            if col.name in seen:
                raise self._error(f"duplicate column '{col.name}'")
            seen.add(col.name)

        return CreateTable(table_name=table_name, columns=columns)

    def _parse_column_def(self) -> Column:
        name = self._expect_identifier("column name")
        type_name = self._expect_identifier(f"type for column '{name}'")
        dtype = DataType.from_name(type_name)

        # Size suffix such as VARCHAR(50) is accepted and ignored
        token = self._peek()
        if token is not None and token.is_punct('('):
            self._advance()
            while not self._advance().is_punct(')'):
                pass

        constraint_words = []
        depth = 0
        while True:
            token = self._peek()
            if token is None:
                break
            if depth == 0 and (token.is_punct(',') or token.is_punct(')')):
                break
            if token.is_punct('('):
                depth += 1
            elif token.is_punct(')'):
                depth -= 1
            constraint_words.append(token.text.upper())
            self._advance()

        constraints = " ".join(constraint_words)
        return Column(
            name=name,
            dtype=dtype,
            is_primary='PRIMARY KEY' in constraints,
            is_unique='UNIQUE' in constraints,
        )

    def _parse_insert(self) -> Insert:
        self._expect_keyword('INSERT')
        self._expect_keyword('INTO')
        table_name = self._expect_identifier("table name")
        self._expect_keyword('VALUES')
        self._expect_punct('(')

        values = [self._parse_literal(_ends_list_item)]
        while self._peek() is not None and self._peek().is_punct(','):
            self._advance()
            values.append(self._parse_literal(_ends_list_item))
        self._expect_punct(')')
        self._expect_end()

        return Insert(table_name=table_name, values=values)

    def _parse_select(self) -> Select:
        self._expect_keyword('SELECT')

        projection = []
        start = None
        while True:
            token = self._peek()
            if token is None:
                raise self._error("expected FROM")
            if token.is_keyword('FROM'):
                break
            if token.is_punct(','):
                if start is None:
                    raise self._error("empty column in projection")
                projection.append(self.query[start:self.tokens[self.pos - 1].end])
                start = None
            elif start is None:
                start = token.start
            self._advance()
        if start is None:
            raise self._error("expected column list")
        projection.append(self.query[start:self.tokens[self.pos - 1].end])

        self._expect_keyword('FROM')
        table_name = self._expect_identifier("table name")

        join = None
        inner = self._accept_keyword('INNER')
        if self._accept_keyword('JOIN'):
            join_table = self._expect_identifier("table name after JOIN")
            self._expect_keyword('ON')
            left = self._parse_column_ref()
            self._expect_punct('=')
            right = self._parse_column_ref()
            join = JoinClause(table_name=join_table, left=left, right=right)
        elif inner:
            raise self._error("expected JOIN")

        where = None
        if self._accept_keyword('WHERE'):
            where = self._parse_condition(lambda tok: False)
        self._expect_end()

        return Select(table_name=table_name, projection=projection, join=join, where=where)

    def _parse_update(self) -> Update:
        self._expect_keyword('UPDATE')
        table_name = self._expect_identifier("table name")
        self._expect_keyword('SET')
        column = self._parse_column_ref()
        self._expect_punct('=')
        value = self._parse_literal(lambda tok: tok.is_keyword('WHERE') or tok.is_punct(','))
        token = self._peek()
        if token is not None and token.is_punct(','):
            raise self._error("only one assignment is supported")
        self._expect_keyword('WHERE')
        where = self._parse_condition(lambda tok: False)
        self._expect_end()

        return Update(table_name=table_name, column=column.column, value=value, where=where)

    def _parse_delete(self) -> Delete:
        self._expect_keyword('DELETE')
        self._expect_keyword('FROM')
        table_name = self._expect_identifier("table name")
        self._expect_keyword('WHERE')
        where = self._parse_condition(lambda tok: False)
        self._expect_end()

        return Delete(table_name=table_name, where=where)

    def _parse_column_ref(self) -> ColumnRef:
        first = self._expect_identifier("column name")
        token = self._peek()
        if token is not None and token.is_punct('.'):
            self._advance()
            return ColumnRef(column=self._expect_identifier("column name"), table=first)
        return ColumnRef(column=first)

    def _parse_condition(self, stop: Callable[[Token], bool]) -> Condition:
        column = self._parse_column_ref()
        self._expect_punct('=')
        return Condition(column=column, value=self._parse_literal(stop))

    def _parse_literal(self, stop: Callable[[Token], bool]) -> str:
        """
        Read a value up to the next stop token.

        A single quoted string yields its contents; anything else yields the
        source text it spans with surrounding quotes and spaces trimmed.
        """
        first = self.pos
        while self._peek() is not None and not stop(self._peek()):
            self.pos += 1
        if self.pos == first:
            raise self._error("expected a value")

        tokens = self.tokens[first:self.pos]
        if len(tokens) == 1 and tokens[0].kind == 'string':
            return tokens[0].value
        return self.query[tokens[0].start:tokens[-1].end].strip(" '\"")
