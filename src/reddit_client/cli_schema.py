"""Schema describing important fields for CLI table rendering."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

Row = Mapping[str, Any]
ValueExtractor = Callable[[Row], Any]
ValueFormatter = Callable[[Any], str]
SortKey = Callable[[Row], Any]


@dataclass(frozen=True)
class Column:
    """Describe how to pull and format a column for Rich tables."""

    header: str
    keys: tuple[str, ...] = ()
    extractor: ValueExtractor | None = None
    formatter: ValueFormatter | None = None
    justify: str = "left"

    def render(self, row: Row) -> str:
        value: Any | None = None
        for key in self.keys:
            value = row.get(key)
            if value not in (None, ""):
                break
        if value in (None, "") and self.extractor:
            value = self.extractor(row)
        if value is None:
            return ""
        if self.formatter:
            return self.formatter(value)
        return str(value)


@dataclass(frozen=True)
class TableView:
    """Describe a Rich table for a CLI command."""

    title: str
    columns: tuple[Column, ...]
    sort_key: SortKey | None = None


def _timestamp_formatter(value: Any) -> str:
    if not isinstance(value, (int, float)) or not value:
        return ""
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def _bool_formatter(value: Any) -> str:
    return "Yes" if bool(value) else "No"


def _truncate(*, max_chars: int = 40) -> ValueFormatter:
    def _formatter(value: Any) -> str:
        s = " ".join(str(value).split())
        return s if len(s) <= max_chars else s[: max_chars - 1] + "…"

    return _formatter


CLI_TABLE_VIEWS: dict[str, TableView] = {
    "inbox.list": TableView(
        title="Inbox",
        columns=(
            Column("Name", keys=("name",)),
            Column("Created", keys=("created_utc",), formatter=_timestamp_formatter),
            Column("Author", keys=("author",)),
            Column("Subject", keys=("subject",), formatter=_truncate(max_chars=30)),
            Column("Body", keys=("body",), formatter=_truncate()),
            Column("Post", keys=("post_id",)),
            Column("New", keys=("new",), formatter=_bool_formatter, justify="center"),
        ),
        sort_key=lambda row: row.get("created_utc") or 0,
    ),
}
