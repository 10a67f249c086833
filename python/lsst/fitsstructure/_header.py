# This file is part of lsst-fitsstructure.
#
# Developed for the LSST Data Management System.
# This product includes software developed by the LSST Project
# (https://www.lsst.org).
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

__all__ = ("Header", "scan_header")

import math
from collections.abc import Iterator, Mapping
from logging import getLogger
from types import MappingProxyType
from typing import final

import astropy.io.fits

from ._errors import MissingKeywordError, MissingTerminatorError
from ._records import (
    BLOCK_SIZE,
    RECORD_SIZE,
    HeaderRecord,
    check_record_characters,
    extract_commentary,
    extract_keyword,
    extract_value,
    has_value_indicator,
    is_commentary_keyword,
    is_terminator,
    parse_record,
)

_LOG = getLogger(__name__)


@final
class Header:
    """The scanned header of a single FITS structure.

    Parameters
    ----------
    records
        All records of the header blocks, in file order, including the
        ``END`` record and any filler records after it in the final block.
    values
        Mapping from keyword to trimmed value string, for keyworded records
        that carry the value indicator.
    commentary
        Mapping from commentary keyword to its fragments in file order.
    offset
        Byte offset of the header within the file, for error messages.

    Notes
    -----
    Instances are immutable; `scan_header` is the usual way to make one.
    """

    def __init__(
        self,
        records: tuple[HeaderRecord, ...],
        values: Mapping[str, str],
        commentary: Mapping[str, tuple[str, ...]],
        offset: int = 0,
    ):
        self._records = records
        self._values = MappingProxyType(dict(values))
        self._commentary = MappingProxyType(dict(commentary))
        self._offset = offset

    __slots__ = ("_records", "_values", "_commentary", "_offset")

    @property
    def records(self) -> tuple[HeaderRecord, ...]:
        """Raw records in file order."""
        return self._records

    @property
    def values(self) -> Mapping[str, str]:
        """Read-only mapping from keyword to value string."""
        return self._values

    @property
    def commentary(self) -> Mapping[str, tuple[str, ...]]:
        """Read-only mapping from commentary keyword to its fragments, in file
        order.
        """
        return self._commentary

    @property
    def block_count(self) -> int:
        """Number of 2880-byte blocks the header occupies."""
        return math.ceil(len(self._records) * RECORD_SIZE / BLOCK_SIZE)

    @property
    def size(self) -> int:
        """Number of bytes the header occupies, including padding."""
        return self.block_count * BLOCK_SIZE

    def __contains__(self, keyword: object) -> bool:
        return keyword in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, keyword: str, default: str | None = None) -> str | None:
        """Return the value of a keyword, or ``default`` if it is absent."""
        return self._values.get(keyword, default)

    def require(self, keyword: str) -> str:
        """Return the value of a keyword.

        Raises
        ------
        MissingKeywordError
            Raised if the keyword is absent.
        """
        try:
            return self._values[keyword]
        except KeyError:
            raise MissingKeywordError(keyword, self._offset) from None

    def to_astropy(self) -> astropy.io.fits.Header:
        """Convert to an `astropy.io.fits.Header`.

        Records after the ``END`` record are dropped.
        """
        cards = []
        for record in self._records:
            if is_terminator(record):
                break
            cards.append(record)
        return astropy.io.fits.Header.fromstring("".join(cards))

    def __str__(self) -> str:
        return "\n".join(record.rstrip() for record in self._records if record.strip())

    def __repr__(self) -> str:
        return f"Header(<{len(self._records)} records>, offset={self._offset})"


def scan_header(view: memoryview | bytes, *, offset: int = 0, strict: bool = False) -> Header:
    """Scan the header blocks at the start of a byte view.

    Parameters
    ----------
    view
        Bytes starting at the first header block of a structure.
    offset
        Byte offset of ``view`` within the file, for error messages.
    strict
        Whether to reject records holding characters outside the printable
        ASCII range.

    Returns
    -------
    header
        The scanned header.  Its records cover every block up to and including
        the one holding the ``END`` record.

    Raises
    ------
    MissingTerminatorError
        Raised if the bytes run out before an ``END`` record is found.
    MalformedRecordError
        Raised if the bytes run out in the middle of a record (or a record
        has forbidden characters and ``strict`` is `True`).
    """
    view = memoryview(view)
    records: list[HeaderRecord] = []
    values: dict[str, str] = {}
    commentary: dict[str, list[str]] = {}
    found = False
    block_start = 0
    while not found:
        if block_start >= len(view):
            raise MissingTerminatorError(
                f"No END record found in the {len(records)} header records starting at byte {offset}."
            )
        block = view[block_start : block_start + BLOCK_SIZE]
        for record_start in range(0, len(block), RECORD_SIZE):
            record_offset = offset + block_start + record_start
            record = parse_record(block[record_start : record_start + RECORD_SIZE], record_offset)
            if strict:
                check_record_characters(record, record_offset)
            records.append(record)
            if found:
                # Filler after END is kept but never interpreted.
                continue
            if is_terminator(record):
                found = True
                continue
            keyword = extract_keyword(record)
            if keyword is None:
                continue
            if is_commentary_keyword(keyword):
                if keyword == "CONTINUE":
                    _LOG.debug(
                        "CONTINUE record at byte %d kept as commentary; long string values are not "
                        "concatenated.",
                        record_offset,
                    )
                commentary.setdefault(keyword, []).append(extract_commentary(record))
            elif has_value_indicator(record):
                values[keyword] = extract_value(record)
        block_start += BLOCK_SIZE
    return Header(
        tuple(records),
        values,
        {keyword: tuple(fragments) for keyword, fragments in commentary.items()},
        offset=offset,
    )
