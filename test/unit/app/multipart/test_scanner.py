"""Tests for the boundary scanner."""

import pytest

from app.core.errors import NoBoundaryFound
from app.models.multipart import PartRange
from app.multipart.scanner import scan

BOUNDARY = b"XyZ"


def _slices(body: bytes) -> list[bytes]:
    return [body[start:end] for start, end in scan(body, BOUNDARY)]


class TestScan:
    """Tests for scan()."""

    def test_single_part(self) -> None:
        """Verify the part range excludes the delimiter and the CRLF after it."""
        body = b"--XyZ\r\nheaders\r\n\r\nvalue\r\n--XyZ--\r\n"

        assert scan(body, BOUNDARY) == [PartRange(7, 25)]
        assert _slices(body) == [b"headers\r\n\r\nvalue\r\n"]

    def test_multiple_parts_in_order(self) -> None:
        """Verify parts come back in body order."""
        body = b"--XyZ\r\nA\r\n--XyZ\r\nB\r\n--XyZ\r\nC\r\n--XyZ--"

        assert _slices(body) == [b"A\r\n", b"B\r\n", b"C\r\n"]

    def test_missing_boundary_raises(self) -> None:
        """Verify a body that never mentions the boundary is rejected."""
        with pytest.raises(NoBoundaryFound):
            scan(b"just some text\r\n", BOUNDARY)

    def test_empty_body_raises(self) -> None:
        """Verify an empty body has no boundary."""
        with pytest.raises(NoBoundaryFound):
            scan(b"", BOUNDARY)

    def test_preamble_and_epilogue_ignored(self) -> None:
        """Verify bytes before the first and after the closing delimiter are dropped."""
        body = b"preamble text\r\n--XyZ\r\nA\r\n--XyZ--\r\nepilogue --XyZ\r\nB\r\n"

        assert _slices(body) == [b"A\r\n"]

    def test_terminal_delimiter_only(self) -> None:
        """Verify a body holding only the closing delimiter has no parts."""
        assert scan(b"--XyZ--\r\n", BOUNDARY) == []

    def test_adjacent_delimiters_yield_empty_range(self) -> None:
        """Verify back-to-back delimiters produce an empty part, not an error."""
        body = b"--XyZ\r\n--XyZ\r\nA\r\n--XyZ--"

        assert _slices(body) == [b"", b"A\r\n"]

    def test_crlf_after_delimiter_is_optional(self) -> None:
        """Verify only one optional CRLF is skipped after a delimiter."""
        body = b"--XyZA\r\n--XyZ\r\n\r\nB\r\n--XyZ--"

        assert _slices(body) == [b"A\r\n", b"\r\nB\r\n"]

    def test_truncated_tail_is_dropped(self) -> None:
        """Verify a final part with no delimiter after it yields no range."""
        body = b"--XyZ\r\nA\r\n--XyZ\r\nB is cut off"

        assert _slices(body) == [b"A\r\n"]

    def test_binary_payload_is_not_decoded(self) -> None:
        """Verify arbitrary non-UTF-8 bytes are scanned by offset only."""
        payload = bytes(range(256)) * 4
        body = b"--XyZ\r\nh: v\r\n\r\n" + payload + b"\r\n--XyZ--"

        (part,) = _slices(body)
        assert part.endswith(payload + b"\r\n")

    def test_prefix_of_boundary_in_payload_is_not_a_delimiter(self) -> None:
        """Verify partial delimiter sequences inside a payload are kept as data."""
        body = b"--XyZ\r\n--Xy -- X--XyQ\r\n--XyZ--"

        assert _slices(body) == [b"--Xy -- X--XyQ\r\n"]
