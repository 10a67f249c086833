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

__all__ = (
    "make_header_bytes",
    "make_record",
    "make_unit_bytes",
    "pad_to_block",
)

from collections.abc import Iterable

import numpy as np

from .._dtypes import PixelDataType
from .._records import BLOCK_SIZE, RECORD_SIZE


def make_record(
    keyword: str, value: str | int | float | bool | None = None, comment: str | None = None
) -> str:
    """Format a single 80-character header record.

    Parameters
    ----------
    keyword
        Keyword name (at most 8 characters).
    value, optional
        Value to format.  Strings are quoted and padded to at least 8
        characters; `None` produces a record with no value indicator.
    comment, optional
        Inline comment, appended after ``" / "``.

    Returns
    -------
    record
        The record, padded with spaces to 80 characters.
    """
    if value is None:
        text = f"{keyword:<8}"
    else:
        if isinstance(value, bool):
            formatted = f"{'T' if value else 'F':>20}"
        elif isinstance(value, str):
            escaped = value.replace("'", "''")
            formatted = f"'{escaped:<8}'"
        else:
            formatted = f"{value:>20}"
        text = f"{keyword:<8}= {formatted}"
    if comment is not None:
        text += f" / {comment}"
    if len(text) > RECORD_SIZE:
        raise ValueError(f"Record {text!r} is longer than {RECORD_SIZE} characters.")
    return f"{text:<{RECORD_SIZE}}"


def pad_to_block(data: bytes, fill: bytes = b"\0") -> bytes:
    """Pad bytes to a multiple of the 2880-byte block size."""
    remainder = len(data) % BLOCK_SIZE
    if remainder:
        data += fill * (BLOCK_SIZE - remainder)
    return data


def make_header_bytes(records: Iterable[str], terminate: bool = True) -> bytes:
    """Concatenate records, append an ``END`` record and pad the result with
    blank records to a whole number of blocks.
    """
    text = "".join(records)
    if terminate:
        text += make_record("END")
    return pad_to_block(text.encode("ascii"), b" ")


def make_unit_bytes(
    array: np.ndarray | None = None,
    *,
    extension: str | None = None,
    bitpix: int | None = None,
    extra: Iterable[str] = (),
) -> bytes:
    """Make the bytes of one complete Header/Data Unit.

    Parameters
    ----------
    array, optional
        Data array; its dtype determines ``BITPIX`` and its shape the
        ``NAXISn`` values.  `None` makes a unit with ``NAXIS = 0``.
    extension, optional
        ``XTENSION`` value; `None` makes a primary unit (``SIMPLE = T``).
    bitpix, optional
        ``BITPIX`` to use when ``array`` is `None`.  Defaults to 8.
    extra, optional
        Additional records to insert before ``END``.

    Returns
    -------
    data
        Header and data blocks, padded to whole blocks.
    """
    if extension is None:
        records = [make_record("SIMPLE", True)]
    else:
        records = [make_record("XTENSION", extension)]
    if array is None:
        records.append(make_record("BITPIX", bitpix if bitpix is not None else 8))
        records.append(make_record("NAXIS", 0))
        data = b""
    else:
        encoding = PixelDataType.from_numpy(array.dtype)
        records.append(make_record("BITPIX", encoding.value))
        records.append(make_record("NAXIS", array.ndim))
        for n, length in enumerate(reversed(array.shape), start=1):
            records.append(make_record(f"NAXIS{n}", length))
        data = pad_to_block(np.ascontiguousarray(array, dtype=encoding.to_numpy()).tobytes())
    if extension is not None:
        records.append(make_record("PCOUNT", 0))
        records.append(make_record("GCOUNT", 1))
    records.extend(extra)
    return make_header_bytes(records) + data
