"""Unit tests for engines.sql.query_builder."""

import pytest

from rematerializer.core.errors import ConfigurationError
from rematerializer.engines.sql import build_select_sql, quote_identifier
from rematerializer.models import ProductTypeEnum


def test_postgres_single_key() -> None:
    sql = build_select_sql("public", "accounts", ["id"], ["id", "balance", "name"])
    assert sql == 'SELECT "id", "balance", "name" FROM "public"."accounts" WHERE "id" = %s'


def test_mysql_uses_backticks() -> None:
    sql = build_select_sql("shop", "orders", ["id"], ["id", "total"], ProductTypeEnum.MYSQL)
    assert sql == "SELECT `id`, `total` FROM `shop`.`orders` WHERE `id` = %s"


def test_trino_uses_qmark_placeholders() -> None:
    sql = build_select_sql("s", "t", ["a", "b"], ["a", "b", "c"], ProductTypeEnum.TRINO)
    assert sql == 'SELECT "a", "b", "c" FROM "s"."t" WHERE "a" = ? AND "b" = ?'


def test_key_order_follows_pk_columns() -> None:
    sql = build_select_sql("s", "t", ["b", "a"], ["a", "b"])
    assert sql.endswith('WHERE "b" = %s AND "a" = %s')


class TestQuoteIdentifier:
    def test_embedded_quotes_doubled(self) -> None:
        assert quote_identifier('we"ird', ProductTypeEnum.POSTGRES) == '"we""ird"'
        assert quote_identifier("we`ird", ProductTypeEnum.MYSQL) == "`we``ird`"

    def test_case_preserved(self) -> None:
        assert quote_identifier("AccountId", ProductTypeEnum.POSTGRES) == '"AccountId"'

    def test_empty_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            quote_identifier("  ", ProductTypeEnum.POSTGRES)

    def test_nul_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="NUL"):
            quote_identifier("a\x00b", ProductTypeEnum.POSTGRES)


@pytest.mark.parametrize(
    ("pks", "cols", "match"),
    [
        (["id"], [], "At least one column"),
        ([], ["id"], "primary-key"),
        (["id"], ["name"], "not in column list"),
    ],
)
def test_invalid_inputs(pks: list, cols: list, match: str) -> None:
    with pytest.raises(ConfigurationError, match=match):
        build_select_sql("s", "t", pks, cols)


class TestPercentInIdentifiers:
    def test_doubled_for_pyformat_drivers(self) -> None:
        sql = build_select_sql("public", "rates", ["id"], ["id", "pct%"])
        assert sql == 'SELECT "id", "pct%%" FROM "public"."rates" WHERE "id" = %s'
        # pyformat drivers interpolate with %, which turns %% back into %
        assert sql % ("1",) == 'SELECT "id", "pct%" FROM "public"."rates" WHERE "id" = 1'

    def test_mysql_statement_survives_interpolation(self) -> None:
        sql = build_select_sql("shop", "50%_off", ["id"], ["id"], ProductTypeEnum.MYSQL)
        assert sql % ("1",) == "SELECT `id` FROM `shop`.`50%_off` WHERE `id` = 1"

    def test_left_alone_for_qmark_driver(self) -> None:
        assert quote_identifier("pct%", ProductTypeEnum.TRINO) == '"pct%"'

    def test_psycopg_converts_the_statement(self) -> None:
        queries = pytest.importorskip("psycopg._queries")
        from psycopg.adapt import Transformer

        sql = build_select_sql("public", "rates", ["id"], ["id", "pct%"])
        query = queries.PostgresQuery(Transformer())
        query.convert(sql, [1])
        assert query.query == b'SELECT "id", "pct%" FROM "public"."rates" WHERE "id" = $1'
