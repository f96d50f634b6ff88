"""Tests for report building and chunking."""

from __future__ import annotations

import pytest

from telegram_address_scraper.core.models import ChatState, Resolution
from telegram_address_scraper.export.formatter import (
    EMPTY_REPORT,
    ExportFormatter,
    split_lines,
)
from telegram_address_scraper.resolution.checksum import checksum_address

USDT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
ADDR_A = "0x" + "a" * 40
ADDR_B = "0x" + "b" * 40
ADDR_C = "0x" + "c" * 40


def address(n: int) -> str:
    return f"0x{n:040x}"


@pytest.fixture
def formatter() -> ExportFormatter:
    return ExportFormatter()


class TestBuildReport:
    def test_empty_state(self, formatter: ExportFormatter) -> None:
        report = formatter.build_report(ChatState(chat_id=1))
        assert report.empty
        assert report.blocks() == [EMPTY_REPORT]

    def test_unresolved_names_only_is_empty(self, formatter: ExportFormatter) -> None:
        state = ChatState(chat_id=1)
        state.names["nobody.eth"] = Resolution.unresolved()
        state.names["later.eth"] = Resolution.pending()
        report = formatter.build_report(state)
        assert report.blocks() == [EMPTY_REPORT]
        assert report.resolved_count == 0

    def test_sorted_case_insensitively(self, formatter: ExportFormatter) -> None:
        state = ChatState(chat_id=1, addresses={ADDR_B, ADDR_A})
        report = formatter.build_report(state)
        assert report.addresses == (ADDR_A, ADDR_B)

    def test_header_counts(self, formatter: ExportFormatter) -> None:
        state = ChatState(chat_id=1, addresses={ADDR_A, ADDR_B})
        state.names["carol.eth"] = Resolution.resolved(ADDR_C)
        state.names["nobody.eth"] = Resolution.unresolved()

        report = formatter.build_report(state, "Drops")

        assert report.raw_count == 2
        assert report.resolved_count == 1
        assert report.unique_count == 3
        assert "(2 ETH + 1 resolved ENS = 3 unique)" in report.header
        assert report.header.startswith("📋 Collected Addresses from Drops\n")

    def test_header_falls_back_to_chat_id(self, formatter: ExportFormatter) -> None:
        state = ChatState(chat_id=-100555, addresses={ADDR_A})
        report = formatter.build_report(state)
        assert "Collected Addresses from Chat -100555" in report.header

    def test_resolved_name_collapses_with_direct_address(
        self, formatter: ExportFormatter
    ) -> None:
        state = ChatState(chat_id=1, addresses={USDT.lower()})
        state.names["tether.eth"] = Resolution.resolved(USDT)

        report = formatter.build_report(state)

        assert report.addresses == (USDT.lower(),)
        assert report.text().count(USDT.lower()) == 1

    def test_names_never_listed(self, formatter: ExportFormatter) -> None:
        state = ChatState(chat_id=1, addresses={ADDR_A})
        state.names["nobody.eth"] = Resolution.unresolved()
        state.names["carol.eth"] = Resolution.resolved(ADDR_C)
        text = formatter.build_report(state).text()
        assert "nobody.eth" not in text
        assert "carol.eth" not in text

    def test_single_block_layout(self, formatter: ExportFormatter) -> None:
        state = ChatState(chat_id=1, addresses={ADDR_B, ADDR_A})
        report = formatter.build_report(state, "Drops")
        assert report.blocks() == [report.header + f"{ADDR_A}\n{ADDR_B}"]


class TestChecksum:
    def test_checksummed_output(self) -> None:
        formatter = ExportFormatter(checksum=checksum_address)
        state = ChatState(chat_id=1, addresses={USDT.lower(), USDC.lower()})
        report = formatter.build_report(state)
        assert report.addresses == (USDC, USDT)

    def test_bad_item_falls_back(self) -> None:
        def picky(addr: str) -> str:
            if addr == ADDR_B:
                raise ValueError("malformed")
            return addr.upper().replace("0X", "0x")

        formatter = ExportFormatter(checksum=picky)
        state = ChatState(chat_id=1, addresses={ADDR_A, ADDR_B})
        report = formatter.build_report(state)
        assert report.addresses == ("0x" + "A" * 40, ADDR_B)

    def test_checksum_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            checksum_address("0x1234")


class TestChunking:
    def test_splits_into_bounded_parts(self, formatter: ExportFormatter) -> None:
        addresses = {address(i) for i in range(1, 301)}
        state = ChatState(chat_id=1, addresses=addresses)
        report = formatter.build_report(state, "Drops")
        limit = 4096

        blocks = report.blocks(limit)

        assert len(report.text()) > limit
        assert len(blocks) >= 2
        assert all(len(b) <= limit for b in blocks)
        assert blocks[0].startswith(f"Part 1/{len(blocks)}:\n\n📋 Collected")

        lines = [
            line
            for block in blocks
            for line in block.splitlines()
            if line.startswith("0x")
        ]
        assert lines == sorted(addresses)

    def test_every_part_is_prefixed(self, formatter: ExportFormatter) -> None:
        state = ChatState(chat_id=1, addresses={address(i) for i in range(1, 51)})
        blocks = formatter.build_report(state).blocks(500)
        total = len(blocks)
        for i, block in enumerate(blocks, start=1):
            assert block.startswith(f"Part {i}/{total}:\n\n")
            assert len(block) <= 500

    def test_lines_never_split(self) -> None:
        lines = [address(i) for i in range(40)]
        blocks = split_lines("header\n\n", lines, 300)
        for block in blocks:
            for line in block.split("\n"):
                assert line in lines or not line.startswith("0x")

    def test_oversized_line_rejected(self) -> None:
        with pytest.raises(ValueError):
            split_lines("", ["x" * 500], 300)


class TestDocument:
    def test_document_rendering(self, formatter: ExportFormatter) -> None:
        state = ChatState(chat_id=-100777, addresses={ADDR_A})
        doc = formatter.build_report(state, "Drops").document()
        assert doc.filename == "addresses_-100777.txt"
        assert doc.caption == "Collected from chat -100777."
        assert doc.content.decode("utf-8").endswith(ADDR_A)
