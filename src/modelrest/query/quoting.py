"""Identifier quoting for SQL fragment assembly.

Every table and column token that reaches a statement passes through
``quote()``. Tokens may arrive bare (``name``), qualified
(``users.name``) or already quoted (`` `name` ``, ``"name"``); the
surrounding quote characters are stripped and the dialect's identifier
delimiter is applied to each part, so quoting twice is a no-op.
"""

from dataclasses import dataclass

_STRIP = "`'\""


@dataclass(frozen=True)
class Dialect:
    """SQL dialect details needed for string assembly.

    Statements are always assembled with ``?`` placeholders;
    executors whose driver uses another paramstyle translate them.
    """

    name: str
    quote_char: str
    paramstyle: str = "qmark"
    # LIMIT value meaning "no limit", for dialects where OFFSET needs a LIMIT
    unbounded_limit: str | None = None


SQLITE = Dialect(name="sqlite", quote_char="`", unbounded_limit="-1")
MYSQL = Dialect(
    name="mysql", quote_char="`", paramstyle="format", unbounded_limit="18446744073709551615"
)
POSTGRESQL = Dialect(name="postgresql", quote_char='"', paramstyle="format")


def is_expression(token: str) -> bool:
    """A parenthesised token is a raw sub-expression, not an identifier."""
    token = token.strip()
    return len(token) > 1 and token[0] == "(" and token[-1] == ")"


def quote_part(part: str, dialect: Dialect = SQLITE) -> str:
    """Quote a single identifier part."""
    q = dialect.quote_char
    part = part.strip().strip(_STRIP)
    return f"{q}{part}{q}"


def split_identifier(token: str) -> tuple[str | None, str]:
    """Split ``table.column`` into its parts; bare names return (None, name)."""
    chunks = token.strip().strip(_STRIP).split(".")
    if len(chunks) == 2:
        return chunks[0].strip(_STRIP), chunks[1].strip(_STRIP)
    return None, ".".join(chunks)


def quote(token: str, dialect: Dialect = SQLITE) -> str:
    """Quote a table, column or ``table.column`` identifier.

    Examples (SQLite dialect):
        quote("name")          -> `name`
        quote("`users.name`")  -> `users`.`name`
        quote("(COUNT(*))")    -> (COUNT(*))
    """
    if is_expression(token):
        return token.strip()
    table, column = split_identifier(token)
    if table is not None:
        return f"{quote_part(table, dialect)}.{quote_part(column, dialect)}"
    return quote_part(column, dialect)


def to_paramstyle(sql: str, dialect: Dialect) -> str:
    """Translate ``?`` placeholders to the dialect's driver paramstyle."""
    if dialect.paramstyle == "format":
        return sql.replace("%", "%%").replace("?", "%s")
    return sql
