"""Tests for evm_callgraph/output.py — output formatting."""

from __future__ import annotations

import json
from typing import Any

import pytest

from evm_callgraph.output import (
    TABLE_CELL_MAX,
    format_json,
    format_output,
    format_table,
    truncate,
)


def make_source_result() -> dict[str, Any]:
    return {
        "status": "1",
        "message": "OK",
        "result": [
            {
                "source": "pragma solidity 0.6.12;\ncontract FiatTokenProxy {}",
                "constructor_args": "",
                "contract_name": "FiatTokenProxy",
                "abi": "[]",
                "compiler_version": "v0.6.12+commit.27d51765",
                "optimization_used": "0",
                "runs": "200",
                "evm_version": "Default",
                "license_type": "",
                "proxy": "1",
                "implementation": "0x43506849d7c04f9138d1a2050bbf3a0c054402dd",
            }
        ],
    }


def make_abi_result() -> dict[str, Any]:
    return {"status": "1", "message": "OK", "result": ['[{"type":"function","name":"name"}]']}


# ── format_output ────────────────────────────────────────────────────────────


def test_format_output_json_round_trips() -> None:
    data = make_source_result()
    assert json.loads(format_output(data, "json")) == data


def test_format_output_case_insensitive() -> None:
    assert format_output({"a": 1}, "JSON") == format_json({"a": 1})


def test_format_output_unknown_format() -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        format_output({}, "xml")


def test_format_json_indent() -> None:
    assert format_json({"a": 1}) == '{\n  "a": 1\n}'


# ── format_table ─────────────────────────────────────────────────────────────


def test_format_table_source_code() -> None:
    out = format_table(make_source_result())
    assert "FiatTokenProxy" in out
    assert "v0.6.12" in out
    assert "Contract" in out


def test_format_table_abi() -> None:
    out = format_output(make_abi_result(), "table")
    assert "ABI" in out
    assert "function" in out


def test_format_table_failed_envelope_shows_detail() -> None:
    out = format_table(
        {"status": "0", "message": "NOTOK", "result": [], "detail": "Invalid API Key"}
    )
    assert "NOTOK" in out
    assert "Invalid API Key" in out


def test_format_table_generic_fallback() -> None:
    out = format_table({"address": "0xabc"})
    assert "0xabc" in out


# ── Helpers ──────────────────────────────────────────────────────────────────


def test_truncate_short_text_unchanged() -> None:
    assert truncate("contract Foo {}") == "contract Foo {}"


def test_truncate_collapses_whitespace() -> None:
    assert truncate("contract\n  Foo {\n}") == "contract Foo { }"


def test_truncate_long_text() -> None:
    out = truncate("x" * 500)
    assert len(out) == TABLE_CELL_MAX
    assert out.endswith("...")


def test_format_table_escapes_markup_in_api_values() -> None:
    data = make_source_result()
    data["result"][0]["implementation"] = "[/bold]0xabc"
    data["result"][0]["contract_name"] = "[red]Foo"
    out = format_table(data)
    assert "[/bold]0xabc" in out
    assert "[red]Foo" in out
