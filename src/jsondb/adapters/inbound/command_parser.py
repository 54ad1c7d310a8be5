"""Command parser for the SQL-shaped dialect the engine accepts.

The parser is permissive: it recognizes the pieces the executor needs and
ignores the rest of the text. It never validates a full SQL grammar, so it
works on sqlglot's token stream rather than its parse tree.

Classification:
    A command is classified by the first keyword sequence found in this
    precedence order: CREATE TABLE, INSERT INTO, SELECT, UPDATE, DELETE.
    Keywords inside string literals, quoted identifiers or comments do not
    count.

Recognized pieces:
    - CREATE TABLE [IF NOT EXISTS] name (...)
    - INSERT INTO name (col, col, ...) VALUES (...)
    - SELECT ... [COUNT(*)] [MIN(col) AS a] [MAX(col) AS b] FROM name
      [WHERE ... col = $N ...] [ORDER BY col [ASC|DESC]]
      [LIMIT n|$N] [OFFSET n|$N]
    - UPDATE name ...
    - DELETE FROM name [WHERE ... col = $N ...]

A command whose table name cannot be found, or whose text cannot be
tokenized at all, parses to a NoOpCommand.
"""

from __future__ import annotations

from dataclasses import dataclass

import sqlglot
from sqlglot.dialects.postgres import Postgres
from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

from jsondb.domain.entities import (
    AggregateFunc,
    AggregateRequest,
    CreateTableCommand,
    DeleteCommand,
    EqualityPredicate,
    InsertCommand,
    NoOpCommand,
    OrderBy,
    ParsedCommand,
    RowBound,
    SelectCommand,
    UpdateCommand,
)
from jsondb.domain.errors import InvalidArgumentError
from jsondb.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CommandDialect(Postgres):
    """Postgres lexing where ``$`` always opens a ``$N`` placeholder.

    Stock Postgres reads ``$tag$...$tag$`` as a dollar-quoted string, which
    turns ``($1,$2)`` into an unterminated string.
    """

    class Tokenizer(Postgres.Tokenizer):
        HEREDOC_STRINGS: list = []
        SINGLE_TOKENS = {**Postgres.Tokenizer.SINGLE_TOKENS, "$": TokenType.PARAMETER}


# Keywords that end a WHERE clause
_WHERE_TERMINATORS = frozenset(
    {
        TokenType.ORDER_BY,
        TokenType.GROUP_BY,
        TokenType.LIMIT,
        TokenType.OFFSET,
        TokenType.HAVING,
        TokenType.RETURNING,
    }
)

# Words after CREATE TABLE that are not the table name
_CREATE_TABLE_MODIFIERS = ("IF", "NOT", "EXISTS")


def tokenize(text: str) -> list[Token]:
    """Split command text into sqlglot tokens. Comments are not tokens.

    Example:
        >>> [t.text for t in tokenize("SELECT * FROM t WHERE id = $1")]
        ['SELECT', '*', 'FROM', 't', 'WHERE', 'id', '=', '$', '1']

    Raises:
        TokenError: If the text has an unterminated string or identifier.
    """
    return sqlglot.tokenize(text, read=CommandDialect)


@dataclass
class _TokenStream:
    """Tokens of one command plus the text they were cut from.

    Keyword tokens carry upper-cased text, so names are read back from the
    source to keep their spelling (``end``, ``Limit``).
    """

    text: str
    tokens: list[Token]

    def __len__(self) -> int:
        return len(self.tokens)

    def is_type(self, index: int, *types: TokenType) -> bool:
        return index < len(self.tokens) and self.tokens[index].token_type in types

    def source(self, index: int) -> str:
        token = self.tokens[index]
        return self.text[token.start : token.end + 1]

    def word(self, index: int) -> str | None:
        """Upper-cased bare word at ``index``, or None."""
        if index >= len(self.tokens) or self.tokens[index].token_type == TokenType.IDENTIFIER:
            return None
        raw = self.source(index)
        return raw.upper() if raw.isidentifier() else None

    def find(self, *types: TokenType, start: int = 0) -> int | None:
        """Index of the first token starting ``types`` in order, or None."""
        width = len(types)
        for i in range(start, len(self.tokens) - width + 1):
            if all(self.tokens[i + j].token_type == t for j, t in enumerate(types)):
                return i
        return None

    def name_at(self, index: int) -> str | None:
        if index >= len(self.tokens):
            return None
        token = self.tokens[index]
        if token.token_type == TokenType.IDENTIFIER:
            return token.text
        raw = self.source(index)
        return raw if raw.isidentifier() else None

    def read_name(self, index: int) -> tuple[str | None, int]:
        """Read a possibly dotted identifier starting at ``index``.

        Returns the last segment (``public.photos`` -> ``photos``,
        ``p.taken_at`` -> ``taken_at``) and the index after the name.
        """
        name = self.name_at(index)
        if name is None:
            return None, index
        index += 1
        while self.is_type(index, TokenType.DOT) and self.name_at(index + 1) is not None:
            name = self.name_at(index + 1)
            index += 2
        return name, index

    def read_parameter(self, index: int) -> tuple[int | None, int]:
        """Read a ``$N`` placeholder; returns its 1-based index and the next index."""
        if not self.is_type(index, TokenType.PARAMETER):
            return None, index
        digits = self.tokens[index].text.lstrip("$")
        if digits.isdigit():
            return int(digits), index + 1
        if self.is_type(index + 1, TokenType.NUMBER) and self.tokens[index + 1].text.isdigit():
            return int(self.tokens[index + 1].text), index + 2
        return None, index


class CommandParser:
    """Parser producing one ParsedCommand per command string.

    Example:
        >>> parser = CommandParser()
        >>> print(parser.parse("SELECT * FROM photos WHERE id = $1 LIMIT 1"))
        Select(photos, WHERE id = $1, LIMIT 1)
    """

    def __init__(self, dialect: type[Postgres] = CommandDialect) -> None:
        """Initialize the parser.

        Args:
            dialect: sqlglot dialect used to lex command text.
        """
        self._dialect = dialect

    def parse(self, text: str) -> ParsedCommand:
        """Parse a command string.

        Args:
            text: The command, with ``$N`` positional placeholders.

        Returns:
            The parsed command variant.

        Raises:
            InvalidArgumentError: If an INSERT has no usable column list.
        """
        try:
            tokens = sqlglot.tokenize(text, read=self._dialect)
        except TokenError as e:
            logger.warning("command_untokenizable", error=str(e))
            return NoOpCommand(reason=f"untokenizable command: {e}")

        stream = _TokenStream(text, tokens)

        if stream.find(TokenType.CREATE, TokenType.TABLE) is not None:
            return self._parse_create_table(stream)
        if stream.find(TokenType.INSERT, TokenType.INTO) is not None:
            return self._parse_insert(stream)
        if stream.find(TokenType.SELECT) is not None:
            return self._parse_select(stream)
        if stream.find(TokenType.UPDATE) is not None:
            return self._parse_update(stream)
        if stream.find(TokenType.DELETE) is not None:
            return self._parse_delete(stream)
        return NoOpCommand(reason="unrecognized statement")

    # -- helpers ---------------------------------------------------------

    @staticmethod
    def _table_after(stream: _TokenStream, *types: TokenType) -> str | None:
        position = stream.find(*types)
        if position is None:
            return None
        name, _ = stream.read_name(position + len(types))
        return name

    @staticmethod
    def _where_predicate(stream: _TokenStream) -> tuple[EqualityPredicate | None, bool]:
        """Find the first ``column = $N`` inside the WHERE clause.

        Returns:
            (predicate or None, whether a WHERE clause exists at all)
        """
        where = stream.find(TokenType.WHERE)
        if where is None:
            return None, False

        end = len(stream)
        for i in range(where + 1, len(stream)):
            if stream.tokens[i].token_type in _WHERE_TERMINATORS:
                end = i
                break

        i = where + 1
        while i < end:
            name, after = stream.read_name(i)
            if name is not None and after + 1 < end and stream.is_type(after, TokenType.EQ):
                index, _ = stream.read_parameter(after + 1)
                if index is not None:
                    return EqualityPredicate(name, index), True
            i = max(after, i + 1)
        return None, True

    @staticmethod
    def _row_bound(stream: _TokenStream, keyword: TokenType) -> RowBound | None:
        position = stream.find(keyword)
        if position is None:
            return None
        if stream.is_type(position + 1, TokenType.NUMBER):
            text = stream.tokens[position + 1].text
            return RowBound(literal=int(text)) if text.isdigit() else None
        index, _ = stream.read_parameter(position + 1)
        if index is None:
            return None
        return RowBound(param_index=index)

    # -- statements ------------------------------------------------------

    def _parse_create_table(self, stream: _TokenStream) -> ParsedCommand:
        index = stream.find(TokenType.CREATE, TokenType.TABLE) + 2
        while index < len(stream) and stream.word(index) in _CREATE_TABLE_MODIFIERS:
            index += 1
        name, _ = stream.read_name(index)
        if name is None:
            return NoOpCommand(reason="CREATE TABLE without table name")
        return CreateTableCommand(table=name)

    def _parse_insert(self, stream: _TokenStream) -> ParsedCommand:
        position = stream.find(TokenType.INSERT, TokenType.INTO)
        name, index = stream.read_name(position + 2)
        if name is None:
            return NoOpCommand(reason="INSERT INTO without table name")

        if not stream.is_type(index, TokenType.L_PAREN):
            raise InvalidArgumentError(f"INSERT INTO {name} has no column list")

        columns: list[str] = []
        index += 1
        expect_name = True
        while index < len(stream):
            if expect_name:
                column = stream.name_at(index)
                if column is None:
                    raise InvalidArgumentError(
                        f"INSERT INTO {name} has a malformed column list "
                        f"near {stream.source(index)!r}"
                    )
                columns.append(column)
                expect_name = False
            elif stream.is_type(index, TokenType.COMMA):
                expect_name = True
            elif stream.is_type(index, TokenType.R_PAREN):
                return InsertCommand(table=name, columns=tuple(columns))
            else:
                raise InvalidArgumentError(
                    f"INSERT INTO {name} has a malformed column list "
                    f"near {stream.source(index)!r}"
                )
            index += 1

        raise InvalidArgumentError(f"INSERT INTO {name} has an unterminated column list")

    def _parse_select(self, stream: _TokenStream) -> ParsedCommand:
        table = self._table_after(stream, TokenType.FROM)
        if table is None:
            return NoOpCommand(reason="SELECT without FROM table")

        count = False
        aggregates: list[AggregateRequest] = []
        for i in range(len(stream)):
            word = stream.word(i)
            if word == "COUNT" and self._is_count_star(stream, i):
                count = True
            elif word in ("MIN", "MAX"):
                aggregate = self._read_aggregate(stream, i)
                if aggregate is not None:
                    aggregates.append(aggregate)

        predicate, _ = self._where_predicate(stream)

        order_by = None
        position = stream.find(TokenType.ORDER_BY)
        if position is not None:
            column, index = stream.read_name(position + 1)
            if column is not None:
                order_by = OrderBy(column=column, ascending=not stream.is_type(index, TokenType.DESC))

        return SelectCommand(
            table=table,
            predicate=predicate,
            order_by=order_by,
            limit=self._row_bound(stream, TokenType.LIMIT),
            offset=self._row_bound(stream, TokenType.OFFSET),
            count=count,
            aggregates=tuple(aggregates),
        )

    @staticmethod
    def _is_count_star(stream: _TokenStream, i: int) -> bool:
        return (
            stream.is_type(i + 1, TokenType.L_PAREN)
            and stream.is_type(i + 2, TokenType.STAR)
            and stream.is_type(i + 3, TokenType.R_PAREN)
        )

    @staticmethod
    def _read_aggregate(stream: _TokenStream, i: int) -> AggregateRequest | None:
        """Read ``MIN(col) [AS alias]`` starting at the function name."""
        if not stream.is_type(i + 1, TokenType.L_PAREN):
            return None
        column, index = stream.read_name(i + 2)
        if column is None or not stream.is_type(index, TokenType.R_PAREN):
            return None

        func = AggregateFunc(stream.word(i))
        alias = func.value.lower()
        index += 1
        if stream.is_type(index, TokenType.ALIAS):
            alias = stream.name_at(index + 1) or alias
        return AggregateRequest(func=func, column=column, alias=alias)

    def _parse_update(self, stream: _TokenStream) -> ParsedCommand:
        table = self._table_after(stream, TokenType.UPDATE)
        if table is None:
            return NoOpCommand(reason="UPDATE without table name")
        return UpdateCommand(table=table)

    def _parse_delete(self, stream: _TokenStream) -> ParsedCommand:
        table = self._table_after(stream, TokenType.FROM)
        if table is None:
            return NoOpCommand(reason="DELETE without FROM table")
        predicate, has_where = self._where_predicate(stream)
        return DeleteCommand(table=table, predicate=predicate, has_where=has_where)
