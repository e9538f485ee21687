"""Tests for the OpenCode message scanner."""

from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from model_pricing import PricingInfo, PricingTable
from usage_scanner.parsers import opencode
from usage_scanner.schemas import Tool


def test_scan_file_reads_tokens_cost_and_created_time(tmp_path: Path) -> None:
    message_file = tmp_path / "msg_1.json"
    message_file.write_bytes(
        orjson.dumps(
            {
                "id": "msg_1",
                "role": "assistant",
                "modelID": "qwen/qwen3-coder",
                "cost": 0.42,
                "time": {"created": 1700000000000, "completed": 1700000005000},
                "tokens": {"input": 100, "output": 20, "reasoning": 5, "cache": {"read": 40, "write": 10}},
            },
            option=orjson.OPT_INDENT_2,
        )
    )

    result = opencode.scan_file(message_file, PricingTable())

    assert len(result.entries) == 1
    entry = result.entries[0]
    assert entry.tool is Tool.OPENCODE
    assert entry.model == "qwen/qwen3-coder"
    assert entry.timestamp == "2023-11-14T22:13:20+00:00"
    assert (entry.input_tokens, entry.output_tokens, entry.cache_read_tokens, entry.cache_write_tokens) == (
        100,
        20,
        40,
        10,
    )
    assert entry.cost == 0.42
    assert result.offset == message_file.stat().st_size


def test_scan_file_estimates_cost_when_not_reported(tmp_path: Path) -> None:
    message_file = tmp_path / "msg_2.json"
    message_file.write_bytes(
        orjson.dumps({"modelID": "gpt-5", "cost": 0, "tokens": {"input": 1000, "output": 100, "cache": {}}})
    )
    pricing = PricingTable({"openai/gpt-5": PricingInfo(input_cost_per_token=1e-6, output_cost_per_token=1e-5)})

    entry = opencode.scan_file(message_file, pricing).entries[0]

    assert entry.cost == pytest.approx(1000 * 1e-6 + 100 * 1e-5)


def test_scan_file_skips_empty_and_malformed_messages(tmp_path: Path) -> None:
    empty_file = tmp_path / "msg_user.json"
    empty_file.write_bytes(orjson.dumps({"role": "user", "time": {"created": 1700000000000}}))
    broken_file = tmp_path / "msg_broken.json"
    broken_file.write_text('{"modelID": "gpt-5", "tokens": ', encoding="utf-8")

    assert opencode.scan_file(empty_file, PricingTable()).entries == []
    broken = opencode.scan_file(broken_file, PricingTable())
    assert broken.entries == []
    assert broken.offset == broken_file.stat().st_size


def test_scan_file_without_model_is_not_priced(tmp_path: Path) -> None:
    message_file = tmp_path / "msg_3.json"
    message_file.write_bytes(orjson.dumps({"tokens": {"input": 5, "output": 5}}))
    pricing = PricingTable({"gpt-5": PricingInfo(input_cost_per_token=1.0)})

    entry = opencode.scan_file(message_file, pricing).entries[0]

    assert entry.model == "unknown"
    assert entry.cost == 0.0


def test_scan_file_keeps_model_id_as_written(tmp_path: Path) -> None:
    message_file = tmp_path / "msg_4.json"
    message_file.write_bytes(orjson.dumps({"modelID": " gpt-5 ", "cost": 0.1, "tokens": {"input": 5}}))

    entry = opencode.scan_file(message_file, PricingTable()).entries[0]

    assert entry.model == " gpt-5 "
