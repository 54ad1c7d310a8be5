"""Unit tests for the command parser."""

from __future__ import annotations

import pytest
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from jsondb.adapters.inbound import CommandParser, tokenize
from jsondb.domain.entities import (
    AggregateFunc,
    AggregateRequest,
    CreateTableCommand,
    DeleteCommand,
    EqualityPredicate,
    InsertCommand,
    NoOpCommand,
    OrderBy,
    RowBound,
    SelectCommand,
    StatementType,
    UpdateCommand,
)
from jsondb.domain.errors import InvalidArgumentError


@pytest.fixture
def parser() -> CommandParser:
    """Create a command parser for testing."""
    return CommandParser()


@pytest.mark.unit
class TestTokenize:
    """Tests for the lexer."""

    def test_placeholder_tokens(self) -> None:
        tokens = tokenize("SELECT * FROM t WHERE id = $1")

        assert [t.text for t in tokens] == ["SELECT", "*", "FROM", "t", "WHERE", "id", "=", "$", "1"]
        assert tokens[-2].token_type == TokenType.PARAMETER
        assert tokens[-1].token_type == TokenType.NUMBER

    def test_adjacent_placeholders(self) -> None:
        """``$1,$2`` is two placeholders, not a dollar-quoted string."""
        tokens = tokenize("VALUES ($1,$2)")

        assert [t.token_type for t in tokens] == [
            TokenType.VALUES,
            TokenType.L_PAREN,
            TokenType.PARAMETER,
            TokenType.NUMBER,
            TokenType.COMMA,
            TokenType.PARAMETER,
            TokenType.NUMBER,
            TokenType.R_PAREN,
        ]

    def test_string_literal_with_escaped_quote(self) -> None:
        tokens = tokenize("SELECT 'it''s' FROM t")

        assert tokens[1].token_type == TokenType.STRING
        assert tokens[1].text == "it's"

    def test_quoted_identifier(self) -> None:
        tokens = tokenize('SELECT "takenAt" FROM t')

        assert tokens[1].token_type == TokenType.IDENTIFIER
        assert tokens[1].text == "takenAt"

    def test_comments_skipped(self) -> None:
        tokens = tokenize("SELECT -- trailing\n* /* block */ FROM t")

        assert [t.text for t in tokens] == ["SELECT", "*", "FROM", "t"]

    def test_unterminated_string_raises(self) -> None:
        with pytest.raises(TokenError):
            tokenize("SELECT * FROM t WHERE title = 'open")


@pytest.mark.unit
class TestClassification:
    """Tests for statement kind precedence."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("CREATE TABLE photos (id TEXT)", StatementType.CREATE_TABLE),
            ("insert into photos (id) values ($1)", StatementType.INSERT),
            ("SELECT * FROM photos", StatementType.SELECT),
            ("UPDATE photos SET title = $1", StatementType.UPDATE),
            ("DELETE FROM photos", StatementType.DELETE),
            ("VACUUM", StatementType.NOOP),
        ],
    )
    def test_statement_kinds(self, parser: CommandParser, text: str, expected: StatementType) -> None:
        assert parser.parse(text).statement_type == expected

    def test_every_variant_exposes_table(self, parser: CommandParser) -> None:
        assert parser.parse("DELETE FROM photos").table == "photos"
        assert parser.parse("UPDATE albums SET title = $1").table == "albums"
        assert parser.parse("VACUUM").table is None

    def test_insert_select_resolves_to_insert(self, parser: CommandParser) -> None:
        """INSERT is checked before SELECT."""
        command = parser.parse("INSERT INTO archive (id) SELECT id FROM photos")

        assert isinstance(command, InsertCommand)

    def test_delete_with_subselect_resolves_to_select(self, parser: CommandParser) -> None:
        """SELECT is checked before DELETE."""
        command = parser.parse("DELETE FROM photos WHERE id IN (SELECT id FROM trash)")

        assert isinstance(command, SelectCommand)

    def test_keyword_inside_string_ignored(self, parser: CommandParser) -> None:
        """Keywords inside literals do not classify the command."""
        command = parser.parse("DELETE FROM photos WHERE title = 'SELECT'")

        assert isinstance(command, DeleteCommand)

    def test_untokenizable_command_is_noop(self, parser: CommandParser) -> None:
        """An unterminated literal degrades to a no-op instead of raising."""
        command = parser.parse("DELETE FROM photos WHERE title = 'unterminated")

        assert isinstance(command, NoOpCommand)
        assert "untokenizable" in command.reason

    def test_keyword_inside_identifier_ignored(self, parser: CommandParser) -> None:
        """Only whole words count as keywords."""
        command = parser.parse("DELETE FROM selected_photos")

        assert command == DeleteCommand(table="selected_photos")


@pytest.mark.unit
class TestCreateTable:
    """Tests for CREATE TABLE parsing."""

    def test_table_name(self, parser: CommandParser) -> None:
        command = parser.parse("CREATE TABLE photos (id VARCHAR(255) PRIMARY KEY, title TEXT)")

        assert command == CreateTableCommand(table="photos")

    def test_if_not_exists(self, parser: CommandParser) -> None:
        command = parser.parse("CREATE TABLE IF NOT EXISTS albums (id TEXT)")

        assert command == CreateTableCommand(table="albums")

    def test_missing_name_is_noop(self, parser: CommandParser) -> None:
        command = parser.parse("CREATE TABLE (id TEXT)")

        assert isinstance(command, NoOpCommand)


@pytest.mark.unit
class TestInsert:
    """Tests for INSERT INTO parsing."""

    def test_columns(self, parser: CommandParser) -> None:
        command = parser.parse("INSERT INTO photos ( id , url,title ) VALUES ($1, $2, $3)")

        assert command == InsertCommand(table="photos", columns=("id", "url", "title"))

    def test_quoted_columns(self, parser: CommandParser) -> None:
        command = parser.parse('INSERT INTO photos ("id", "takenAt") VALUES ($1, $2)')

        assert isinstance(command, InsertCommand)
        assert command.columns == ("id", "takenAt")

    @pytest.mark.parametrize(
        "text",
        [
            "INSERT INTO photos VALUES ($1, $2)",
            "INSERT INTO photos (id, , url) VALUES ($1, $2)",
            "INSERT INTO photos () VALUES ()",
            "INSERT INTO photos (id, url",
        ],
    )
    def test_malformed_column_list(self, parser: CommandParser, text: str) -> None:
        with pytest.raises(InvalidArgumentError):
            parser.parse(text)

    def test_placeholders_without_spaces(self, parser: CommandParser) -> None:
        command = parser.parse("INSERT INTO photos (id,url) VALUES ($1,$2)")

        assert command == InsertCommand(table="photos", columns=("id", "url"))

    def test_keyword_named_columns_keep_spelling(self, parser: CommandParser) -> None:
        command = parser.parse("INSERT INTO events (end, Limit) VALUES ($1, $2)")

        assert command == InsertCommand(table="events", columns=("end", "Limit"))

    def test_missing_table_is_noop(self, parser: CommandParser) -> None:
        command = parser.parse("INSERT INTO (id) VALUES ($1)")

        assert isinstance(command, NoOpCommand)


@pytest.mark.unit
class TestSelect:
    """Tests for SELECT parsing."""

    def test_plain(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT * FROM photos")

        assert command == SelectCommand(table="photos")
        assert not command.is_aggregate

    def test_where_equality(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT * FROM photos WHERE album_id = $2")

        assert isinstance(command, SelectCommand)
        assert command.predicate == EqualityPredicate(column="album_id", param_index=2)

    def test_first_equality_in_conjunction(self, parser: CommandParser) -> None:
        """Only the first column = $N term is used."""
        command = parser.parse(
            "SELECT * FROM photos WHERE taken_at >= $1 AND hidden = $2 AND album = $3"
        )

        assert command.predicate == EqualityPredicate(column="hidden", param_index=2)

    def test_where_placeholder_without_spaces(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT * FROM photos WHERE album_id=$1 LIMIT $2")

        assert command.predicate == EqualityPredicate(column="album_id", param_index=1)
        assert command.limit == RowBound(param_index=2)

    def test_multiline_order_by(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT * FROM photos\nORDER\n  BY taken_at DESC")

        assert command.order_by == OrderBy(column="taken_at", ascending=False)

    def test_where_ignores_literal_equality(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT * FROM photos WHERE hidden = 'false'")

        assert command.predicate is None

    def test_qualified_names(self, parser: CommandParser) -> None:
        command = parser.parse(
            "SELECT p.* FROM public.photos p WHERE p.album = $1 ORDER BY p.taken_at DESC"
        )

        assert command.table == "photos"
        assert command.predicate == EqualityPredicate(column="album", param_index=1)
        assert command.order_by == OrderBy(column="taken_at", ascending=False)

    def test_where_stops_at_order_by(self, parser: CommandParser) -> None:
        """Placeholders after the WHERE clause are not predicates."""
        command = parser.parse("SELECT * FROM photos WHERE hidden IS NULL ORDER BY x LIMIT $1")

        assert command.predicate is None
        assert command.limit == RowBound(param_index=1)

    def test_order_by_default_ascending(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT * FROM photos ORDER BY taken_at")

        assert command.order_by == OrderBy(column="taken_at", ascending=True)

    def test_order_by_explicit_asc(self, parser: CommandParser) -> None:
        command = parser.parse("select * from photos order by taken_at asc limit 5")

        assert command.order_by == OrderBy(column="taken_at", ascending=True)
        assert command.limit == RowBound(literal=5)

    def test_limit_and_offset(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT * FROM photos LIMIT $1 OFFSET $2")

        assert command.limit == RowBound(param_index=1)
        assert command.offset == RowBound(param_index=2)

    def test_count_star(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT COUNT(*) FROM photos WHERE album = $1")

        assert command.count is True
        assert command.is_aggregate
        assert command.predicate == EqualityPredicate(column="album", param_index=1)

    def test_count_with_min_max(self, parser: CommandParser) -> None:
        command = parser.parse(
            "SELECT COUNT(*), MIN(p.taken_at_naive) as start, MAX(taken_at_naive) AS end "
            "FROM photos p"
        )

        assert command.count is True
        assert command.aggregates == (
            AggregateRequest(AggregateFunc.MIN, "taken_at_naive", "start"),
            AggregateRequest(AggregateFunc.MAX, "taken_at_naive", "end"),
        )

    def test_aggregate_default_alias(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT MAX(taken_at) FROM photos")

        assert command.aggregates == (AggregateRequest(AggregateFunc.MAX, "taken_at", "max"),)
        assert command.count is False
        assert not command.is_aggregate

    def test_count_of_column_is_not_count_star(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT COUNT(id) FROM photos")

        assert command.count is False

    def test_missing_from_is_noop(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT 1")

        assert isinstance(command, NoOpCommand)

    def test_str(self, parser: CommandParser) -> None:
        command = parser.parse("SELECT * FROM photos WHERE id = $1 LIMIT 1")

        assert str(command) == "Select(photos, WHERE id = $1, LIMIT 1)"


@pytest.mark.unit
class TestUpdateDelete:
    """Tests for UPDATE and DELETE parsing."""

    def test_update_table(self, parser: CommandParser) -> None:
        command = parser.parse("UPDATE photos SET title = $1 WHERE id = $2")

        assert command == UpdateCommand(table="photos")

    def test_update_missing_table_is_noop(self, parser: CommandParser) -> None:
        assert isinstance(parser.parse("UPDATE"), NoOpCommand)

    def test_delete_with_predicate(self, parser: CommandParser) -> None:
        command = parser.parse("DELETE FROM photos WHERE id = $1")

        assert command == DeleteCommand(
            table="photos",
            predicate=EqualityPredicate(column="id", param_index=1),
            has_where=True,
        )

    def test_delete_without_where(self, parser: CommandParser) -> None:
        command = parser.parse("DELETE FROM photos")

        assert command == DeleteCommand(table="photos", predicate=None, has_where=False)

    def test_delete_unsupported_where(self, parser: CommandParser) -> None:
        command = parser.parse("DELETE FROM photos WHERE hidden IS TRUE")

        assert command == DeleteCommand(table="photos", predicate=None, has_where=True)

    def test_delete_missing_from_is_noop(self, parser: CommandParser) -> None:
        assert isinstance(parser.parse("DELETE photos"), NoOpCommand)
