"""Output format routing for evm_callgraph.

Converts result dicts to the requested format: json or table.

Design rules:
- JSON: 2-space indent, key order preserved, utf-8
- Table: Rich-formatted, one row per result element

All functions return strings. The caller writes to stdout.
"""

from __future__ import annotations

import io
import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

VALID_FORMATS = {"json", "table"}

# Long values (source text, ABI JSON) are cut to this many characters in tables
TABLE_CELL_MAX = 60


def format_output(data: Any, fmt: str) -> str:
    """
    Format data for stdout output.

    Args:
        data: Result dict, list, or any JSON-serialisable value.
        fmt: "json" | "table"

    Returns:
        Formatted string ready to write to stdout.

    Raises:
        ValueError: If fmt is not a recognised format.
    """
    fmt = fmt.lower()
    if fmt not in VALID_FORMATS:
        raise ValueError(f"Unknown format {fmt!r}. Valid: {sorted(VALID_FORMATS)}")

    if fmt == "table":
        return format_table(data)
    return format_json(data)


# ── JSON ─────────────────────────────────────────────────────────────────────


def format_json(data: Any) -> str:
    """Pretty-print data as JSON (2-space indent)."""
    return json.dumps(data, indent=2, ensure_ascii=False)


# ── Table ────────────────────────────────────────────────────────────────────


def format_table(data: Any) -> str:
    """
    Format as a Rich terminal table.

    Handles:
    - Source code envelopes (dict with 'result' of objects)
    - ABI envelopes (dict with 'result' of strings)
    - Generic fallback
    """
    buf = io.StringIO()
    console = Console(file=buf, highlight=False, markup=True, width=120)

    if isinstance(data, dict) and "result" in data:
        results = data["result"]
        if results and isinstance(results[0], dict):
            _render_source_table(console, data)
        else:
            _render_abi_table(console, data)
    else:
        console.print_json(json.dumps(data))

    return buf.getvalue()


def _status_title(data: dict[str, Any]) -> str:
    color = "green" if data.get("status") == "1" else "red"
    status = escape(str(data.get("status", "?")))
    title = f"[{color}]{status}[/{color}] {escape(str(data.get('message', '')))}"
    if data.get("detail"):
        title += f": {escape(str(data['detail']))}"
    return title


def _render_source_table(console: Console, data: dict[str, Any]) -> None:
    table = Table(title=_status_title(data), header_style="bold blue", min_width=60)
    table.add_column("Contract", style="bold", no_wrap=True)
    table.add_column("Compiler", no_wrap=True)
    table.add_column("Verified")
    table.add_column("Proxy", no_wrap=True)
    table.add_column("Source", overflow="fold")

    for item in data["result"]:
        verified = bool(item.get("source"))
        table.add_row(
            escape(item.get("contract_name", "")),
            escape(item.get("compiler_version", "")),
            "[green]yes[/green]" if verified else "[red]no[/red]",
            escape(item.get("implementation", "")) if item.get("proxy") == "1" else "",
            escape(truncate(item.get("source", ""))),
        )

    console.print(table)


def _render_abi_table(console: Console, data: dict[str, Any]) -> None:
    table = Table(title=_status_title(data), header_style="bold blue", min_width=60)
    table.add_column("#", justify="right")
    table.add_column("ABI", overflow="fold")

    for i, abi in enumerate(data.get("result", [])):
        table.add_row(str(i), escape(truncate(str(abi))))

    console.print(table)


# ── Helpers ──────────────────────────────────────────────────────────────────


def truncate(text: str, limit: int = TABLE_CELL_MAX) -> str:
    """Collapse to one line and cut to `limit` characters with an ellipsis."""
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 3] + "..."
