"""Conditional GET and byte-range handling for assets.

Implements the subset of RFC 9110 section 13 and 14 that applies to a
resource with a modification time and no entity tag:

- ``If-Unmodified-Since`` -> 412 when the asset changed after the date
- ``If-Modified-Since`` -> 304 when it did not (ignored if
  ``If-None-Match`` is present)
- ``Range: bytes=...`` -> 206 for one satisfiable range, 416 for an
  unsatisfiable one; several ranges or a malformed header are ignored
- ``If-Range`` (date form only) -> the range is honored only when the
  asset is unchanged since the date

Unparseable dates are ignored, as if the header were absent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime

from spaserve.assets import Asset
from spaserve.errors import PreconditionFailed, RangeNotSatisfiable
from spaserve.http.request import Request
from spaserve.http.response import Response


def parse_http_date(value: str | None) -> datetime | None:
    """Parse an HTTP-date, or return None if it is missing or invalid."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_http_date(stamp: datetime) -> str:
    """Format *stamp* as an IMF-fixdate (``Sun, 06 Nov 1994 08:49:37 GMT``)."""
    return format_datetime(stamp.astimezone(UTC), usegmt=True)


@dataclass(frozen=True, slots=True)
class ByteRange:
    """An inclusive byte range resolved against a known size."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.end}/{size}"


def _parse_position(digits: str) -> int | None:
    if not (digits.isascii() and digits.isdigit()):
        return None
    try:
        return int(digits)
    except ValueError:
        # Past the int() digit limit
        return None


def parse_range(header: str | None, size: int) -> ByteRange | None:
    """Resolve a ``Range`` header against a body of *size* bytes.

    Returns None when the header should be ignored (absent, not a
    ``bytes`` range, malformed, or several ranges).

    Raises:
        RangeNotSatisfiable: If the single range starts past the end.
    """
    if not header:
        return None
    unit, _, ranges = header.partition("=")
    if unit.strip().lower() != "bytes" or not ranges or "," in ranges:
        return None

    first, dash, last = ranges.strip().partition("-")
    if not dash:
        return None
    first, last = first.strip(), last.strip()

    if not first:
        # Suffix form: the last N bytes
        suffix = _parse_position(last)
        if suffix is None:
            return None
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiable(size)
        return ByteRange(max(size - suffix, 0), size - 1)

    start = _parse_position(first)
    end = _parse_position(last) if last else size - 1
    if start is None or end is None:
        return None
    if end < start:
        return None
    if start >= size:
        raise RangeNotSatisfiable(size)
    return ByteRange(start, min(end, size - 1))


def _unmodified_since(asset: Asset, date: datetime) -> bool:
    return asset.last_modified <= date


def _range_allowed(request: Request, asset: Asset) -> bool:
    if_range = request.headers.get("if-range")
    if if_range is None:
        return True
    if if_range.startswith(('"', "W/")):
        # Entity tags never match: assets carry none
        return False
    date = parse_http_date(if_range)
    return date is not None and _unmodified_since(asset, date)


def serve_asset(
    request: Request,
    asset: Asset,
    headers: tuple[tuple[str, str], ...] = (),
) -> Response:
    """Build the response for *asset*, honoring conditional and range headers.

    *headers* (e.g. ``Cache-Control``) are added to every outcome,
    including 304 and 206.

    Raises:
        PreconditionFailed: ``If-Unmodified-Since`` is older than the asset.
        RangeNotSatisfiable: The requested range starts past the end.
    """
    base = (
        *headers,
        ("Last-Modified", format_http_date(asset.last_modified)),
        ("Accept-Ranges", "bytes"),
    )

    unmodified_since = parse_http_date(request.headers.get("if-unmodified-since"))
    if unmodified_since is not None and not _unmodified_since(asset, unmodified_since):
        raise PreconditionFailed

    if "if-none-match" not in request.headers:
        modified_since = parse_http_date(request.headers.get("if-modified-since"))
        if modified_since is not None and _unmodified_since(asset, modified_since):
            return Response(body=b"", status=304, content_type="", headers=base)

    if "range" in request.headers and _range_allowed(request, asset):
        byte_range = parse_range(request.headers.get("range"), asset.size)
        if byte_range is not None:
            return Response(
                body=asset.data[byte_range.start : byte_range.end + 1],
                status=206,
                content_type=asset.content_type,
                headers=(*base, ("Content-Range", byte_range.content_range(asset.size))),
            )

    return Response(body=asset.data, content_type=asset.content_type, headers=base)
