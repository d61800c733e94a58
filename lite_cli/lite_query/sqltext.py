"""Text-level SQL classification and pagination rewriting.

This is not a parser. Statements are run through the sqlparse lexer so comments
and string literals are recognised, then LIMIT/OFFSET clauses are located at
parenthesis depth zero. Subquery paging and literals that merely contain the
words LIMIT or OFFSET are left alone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlparse import tokens as T
from sqlparse.lexer import Lexer
from sqlparse.sql import Token

from .types import Pagination, StatementKind

DEFAULT_PAGE_SIZE = 500
QUERY_PAGE_SIZE = 1000

_LEADING_KEYWORDS: tuple[tuple[re.Pattern[str], StatementKind], ...] = (
    (re.compile(r"SELECT\b", re.IGNORECASE), StatementKind.SELECT),
    (re.compile(r"INSERT\b", re.IGNORECASE), StatementKind.INSERT),
    (re.compile(r"UPDATE\b", re.IGNORECASE), StatementKind.UPDATE),
    (re.compile(r"DELETE\b", re.IGNORECASE), StatementKind.DELETE),
)


@dataclass(frozen=True, slots=True)
class _PagingClauses:
    limit: int | None
    offset: int | None
    spans: tuple[tuple[int, int], ...]


def clean_sql(sql: str) -> str:
    """Strip comments, collapse whitespace outside literals and drop a trailing ``;``."""
    return _render(_tokens(sql))


def classify(sql: str) -> StatementKind:
    cleaned = clean_sql(sql)
    for pattern, kind in _LEADING_KEYWORDS:
        if pattern.match(cleaned):
            return kind
    return StatementKind.EXEC


def extract_pagination(sql: str) -> Pagination | None:
    """Read the outermost LIMIT/OFFSET of ``sql``.

    ``LIMIT n`` alone is page 1. An offset maps to ``offset // size + 1``, which
    needs a positive size; without one the statement reports no pagination.
    """
    clauses = _find_paging(_tokens(sql))
    if clauses.limit is None or clauses.limit <= 0:
        return None
    offset = clauses.offset or 0
    return Pagination(page=offset // clauses.limit + 1, size=clauses.limit)


def has_pagination(sql: str) -> bool:
    return bool(_find_paging(_tokens(sql)).spans)


def strip_pagination(sql: str) -> str:
    """Return the cleaned statement without its outermost LIMIT/OFFSET clauses."""
    tokens = _tokens(sql)
    skipped: set[int] = set()
    for start, end in _find_paging(tokens).spans:
        skipped.update(range(start, end))
    return _render(tokens, skipped)


def resolve_pagination(
    page: int | None,
    size: int | None,
    sql: str,
    default_size: int = DEFAULT_PAGE_SIZE,
) -> Pagination:
    """Pick the page window: caller values, else the statement's own clause, else defaults."""
    page_given = page is not None and page >= 1
    size_given = size is not None and size >= 1
    if page_given and size_given:
        return Pagination(page=page, size=size)  # type: ignore[arg-type]
    if not page_given and not size_given:
        return extract_pagination(sql) or Pagination(page=1, size=default_size)
    return Pagination(
        page=page if page_given else 1,  # type: ignore[arg-type]
        size=size if size_given else default_size,  # type: ignore[arg-type]
    )


def paginate(sql: str, pagination: Pagination) -> str:
    """Rewrite ``sql`` to fetch one row past the page so a next page can be detected."""
    return f"{strip_pagination(sql)} LIMIT {pagination.size + 1} OFFSET {pagination.offset}"


def window(sql: str, pagination: Pagination) -> str:
    """Rewrite ``sql`` to fetch exactly one page."""
    return f"{strip_pagination(sql)} LIMIT {pagination.size} OFFSET {pagination.offset}"


def count_sql(sql: str) -> str:
    return f"SELECT COUNT(*) FROM ({strip_pagination(sql)}) AS _count"


def dry_run_sql(sql: str) -> str:
    """Zero-row wrapper that still reports the statement's result columns."""
    return f"SELECT * FROM ({clean_sql(sql)}) AS t LIMIT 0"


# ---------------------------------------------------------------------------
# Internal helpers


def _tokens(sql: str) -> list[Token]:
    # lexing only; sqlparse.parse would also group, which caps nesting depth
    return [Token(ttype, value) for ttype, value in Lexer.get_default_instance().get_tokens(sql or "")]


def _render(tokens: list[Token], skipped: set[int] | None = None) -> str:
    pieces: list[str] = []
    pending_space = False
    for index, token in enumerate(tokens):
        if skipped and index in skipped:
            pending_space = True
            continue
        if token.is_whitespace or token.ttype in T.Comment:
            pending_space = True
            continue
        if pending_space and pieces:
            pieces.append(" ")
        pending_space = False
        pieces.append(token.value)
    text = "".join(pieces).strip()
    while text.endswith(";"):
        text = text[:-1].rstrip()
    return text


def _is_keyword(token: Token, word: str) -> bool:
    return token.ttype in T.Keyword and token.value.upper() == word


def _as_integer(token: Token | None) -> int | None:
    if token is not None and token.ttype in T.Number.Integer:
        return int(token.value)
    return None


def _next_significant(tokens: list[Token], start: int) -> tuple[int, Token | None]:
    for index in range(start, len(tokens)):
        token = tokens[index]
        if not (token.is_whitespace or token.ttype in T.Comment):
            return index, token
    return len(tokens), None


def _find_paging(tokens: list[Token]) -> _PagingClauses:
    limit: int | None = None
    offset: int | None = None
    spans: list[tuple[int, int]] = []
    depth = 0
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token.ttype in T.Punctuation:
            if token.value == "(":
                depth += 1
            elif token.value == ")":
                depth = max(depth - 1, 0)
        elif depth == 0 and (_is_keyword(token, "LIMIT") or _is_keyword(token, "OFFSET")):
            value_index, value_token = _next_significant(tokens, index + 1)
            value = _as_integer(value_token)
            if value is not None:
                end = value_index + 1
                if _is_keyword(token, "OFFSET"):
                    offset = value
                else:
                    limit = value
                    # SQLite also accepts "LIMIT <offset>, <count>"
                    comma_index, comma = _next_significant(tokens, end)
                    if comma is not None and comma.ttype in T.Punctuation and comma.value == ",":
                        count_index, count_token = _next_significant(tokens, comma_index + 1)
                        count = _as_integer(count_token)
                        if count is not None:
                            offset, limit = value, count
                            end = count_index + 1
                spans.append((index, end))
                index = end
                continue
        index += 1
    return _PagingClauses(limit=limit, offset=offset, spans=tuple(spans))
