"""SQL template preprocessing.

Templates may contain named placeholders ``{:name}``, table markers
``{{schema.table}}`` and column markers ``[[table.column]]``. Rendering
replaces each placeholder occurrence with the dialect's anonymous
placeholder and quotes the markers, returning the placeholder names in
occurrence order so values can be bound positionally. For drivers using
the ``format`` or ``pyformat`` paramstyle literal ``%`` signs are doubled.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lark import Lark, Token, Transformer

if TYPE_CHECKING:
    from pydbx.dialect._base import Dialect

_GRAMMAR = r"""
start: _item*

_item: placeholder
     | table_ref
     | column_ref
     | text

placeholder: PLACEHOLDER
table_ref: TABLE_REF
column_ref: COLUMN_REF
text: TEXT | STRAY

PLACEHOLDER.3: /\{:[A-Za-z0-9_]+\}/
TABLE_REF.2: /\{\{[\w\-. ]+\}\}/
COLUMN_REF.2: /\[\[[\w\-. ]+\]\]/
TEXT: /[^{\[]+/
STRAY: /[{\[]/
"""

_parser = Lark(_GRAMMAR, parser="lalr", lexer="basic")


class _TemplateRenderer(Transformer):
    """Renders one parsed template, collecting placeholder names."""

    def __init__(self, dialect: Dialect) -> None:
        super().__init__()
        self.dialect = dialect
        self.placeholders: list[str] = []

    def start(self, items: list[str]) -> str:
        return "".join(items)

    def placeholder(self, items: list[Token]) -> str:
        self.placeholders.append(items[0][2:-1])
        return self.dialect.generate_placeholder(len(self.placeholders))

    def table_ref(self, items: list[Token]) -> str:
        return self.dialect.quote_table_name(items[0][2:-2])

    def column_ref(self, items: list[Token]) -> str:
        return self.dialect.quote_column_name(items[0][2:-2])

    def text(self, items: list[Token]) -> str:
        if self.dialect.escapes_percent:
            return items[0].replace("%", "%%")
        return str(items[0])


def process_sql(dialect: Dialect, sql: str) -> tuple[str, list[str]]:
    """Render a SQL template for a dialect.

    Args:
        dialect: Dialect providing placeholders and identifier quoting.
        sql: The template text.

    Returns:
        The literal SQL and the placeholder names in occurrence order,
        repeats included.
    """
    renderer = _TemplateRenderer(dialect)
    raw_sql = renderer.transform(_parser.parse(sql))
    return raw_sql, renderer.placeholders
