"""Rich-based formatters for ssmedit output."""

from __future__ import annotations

from datetime import datetime

from rich.table import Table
from rich.text import Text

from ssmedit.models import ParameterSummary

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_TYPE_STYLES = {
    "SecureString": "bold yellow",
    "StringList": "bold cyan",
    "String": "bold green",
}


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime(TIMESTAMP_FORMAT)


def render_parameter_list(
    summaries: list[ParameterSummary],
    prefix: str | None = None,
) -> Table:
    """Render a listing of parameters as a table.

    Args:
        summaries: Parameters to show, in display order.
        prefix:    Name prefix the listing was filtered by, used in the title.

    Returns:
        A :class:`rich.table.Table`.
    """
    title = f"Parameters under {prefix}" if prefix else "Parameters"
    table = Table(title=title, show_lines=False)
    table.add_column("Name", overflow="fold")
    table.add_column("Type", style="dim")
    table.add_column("Version", justify="right")
    table.add_column("Last Modified")

    for summary in summaries:
        style = _TYPE_STYLES.get(summary.type, "bold")
        table.add_row(
            Text(summary.name, style=style),
            summary.type,
            str(summary.version),
            format_timestamp(summary.last_modified),
        )

    return table


def summaries_to_json(summaries: list[ParameterSummary]) -> list[dict]:
    return [
        {
            "name": s.name,
            "type": s.type,
            "version": s.version,
            "last_modified": format_timestamp(s.last_modified),
        }
        for s in summaries
    ]
