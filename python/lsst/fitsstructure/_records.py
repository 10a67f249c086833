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

"""Parsing of individual 80-character FITS header records ("cards").

A record is laid out as:

- bytes 0-7: the keyword name, left-justified and space-padded;
- bytes 8-9: the value indicator ``"= "`` if the record carries a value;
- bytes 10-79: the value, optionally followed by ``/`` and a comment.

Commentary keywords (``COMMENT``, ``HISTORY``, ``CONTINUE``) never carry a
value; everything from byte 8 onward is kept verbatim instead.

``CONTINUE`` records are the long-string convention, which splits one string
value over several records.  Concatenating them is not supported: they are
surfaced as ordinary commentary fragments and the value of the record they
continue is left exactly as it appears in that record.
"""

from __future__ import annotations

__all__ = (
    "BLOCK_SIZE",
    "COMMENTARY_KEYWORDS",
    "HeaderRecord",
    "RECORDS_PER_BLOCK",
    "RECORD_SIZE",
    "check_record_characters",
    "extract_commentary",
    "extract_keyword",
    "extract_value",
    "has_value_indicator",
    "interpret_value",
    "is_commentary_keyword",
    "is_terminator",
    "parse_record",
)

import re
from typing import TypeAlias

from ._errors import InvalidKeywordValueError, MalformedRecordError

BLOCK_SIZE = 2880
"""Size in bytes of every header and data block."""

RECORD_SIZE = 80
"""Size in bytes of a header record."""

RECORDS_PER_BLOCK = BLOCK_SIZE // RECORD_SIZE

KEYWORD_SIZE = 8

VALUE_INDICATOR = "= "

COMMENTARY_KEYWORDS = frozenset({"COMMENT", "HISTORY", "CONTINUE"})

TERMINATOR_KEYWORD = "END"

HeaderRecord: TypeAlias = str
"""A validated 80-character header record."""

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([EeDd][+-]?\d+)?")


def parse_record(raw: bytes | bytearray | memoryview | str, offset: int = 0) -> HeaderRecord:
    """Validate the length of a raw header record and return it as text.

    Parameters
    ----------
    raw
        The raw record.  Byte-like values are decoded as Latin-1, so each byte
        maps to exactly one character.
    offset
        Byte offset of the record within the file, for error messages.

    Returns
    -------
    record
        The record as an 80-character `str`.

    Raises
    ------
    MalformedRecordError
        Raised if the record is not exactly 80 characters long.
    """
    if isinstance(raw, str):
        record = raw
    else:
        record = bytes(raw).decode("latin-1")
    if len(record) != RECORD_SIZE:
        raise MalformedRecordError(
            f"Header record at byte {offset} is {len(record)} characters; expected {RECORD_SIZE}: "
            f"{record!r}."
        )
    return record


def check_record_characters(record: HeaderRecord, offset: int = 0) -> None:
    """Raise `MalformedRecordError` if a record holds any character outside
    the printable ASCII range (decimal 32 through 126).
    """
    for i, char in enumerate(record):
        if not (32 <= ord(char) <= 126):
            raise MalformedRecordError(
                f"Header record at byte {offset} has forbidden character code {ord(char)} "
                f"at byte {offset + i}."
            )


def extract_keyword(record: str) -> str | None:
    """Return the keyword of a record, or `None` if its keyword field is blank
    or starts with a space.
    """
    record = parse_record(record)
    field = record[:KEYWORD_SIZE]
    if field[0] == " " or len(field) != KEYWORD_SIZE:
        return None
    return field.rstrip()


def has_value_indicator(record: str) -> bool:
    """Test whether bytes 8-9 of a record hold the value indicator ``"= "``."""
    return record[KEYWORD_SIZE : KEYWORD_SIZE + 2] == VALUE_INDICATOR


def is_commentary_keyword(keyword: str) -> bool:
    """Test whether a keyword is one of ``COMMENT``, ``HISTORY`` or
    ``CONTINUE``.
    """
    return keyword in COMMENTARY_KEYWORDS


def is_terminator(record: str) -> bool:
    """Test whether a record is the ``END`` record that terminates a header.

    The trimmed keyword field must equal ``END`` exactly, so keywords that
    merely start with it (``ENDTIME``) do not terminate the header.
    """
    return record[:KEYWORD_SIZE].strip() == TERMINATOR_KEYWORD


def extract_commentary(record: str) -> str:
    """Return the verbatim commentary fragment (bytes 8 onward) of a
    record.
    """
    return parse_record(record)[KEYWORD_SIZE:]


def extract_value(record: str) -> str:
    """Return the value field of a record as a trimmed string.

    The value is everything after the value indicator, up to the first ``/``
    that is not inside a quoted string.  Quotes are kept, so string values
    come back as e.g. ``"'IMAGE   '"``.

    Must not be called for commentary keywords.
    """
    field = parse_record(record)[KEYWORD_SIZE + 2 :]
    in_string = False
    for i, char in enumerate(field):
        if char == "'":
            # A doubled quote inside a string toggles twice, which is what we
            # want.
            in_string = not in_string
        elif char == "/" and not in_string:
            return field[:i].strip()
    return field.strip()


def interpret_value(value: str) -> str | bool | int | float | None:
    """Interpret a value string returned by `extract_value`.

    Parameters
    ----------
    value
        Trimmed value string.

    Returns
    -------
    interpreted
        A `str` for quoted strings (with trailing spaces removed and ``''``
        unescaped), a `bool` for ``T`` or ``F``, an `int` or `float` for
        numbers (``D`` exponents are accepted), or `None` for an undefined
        (empty) value.

    Raises
    ------
    InvalidKeywordValueError
        Raised if the value is not any of the above.  Complex values are not
        supported.
    """
    if not value:
        return None
    if value.startswith("'"):
        if len(value) < 2 or not value.endswith("'"):
            raise InvalidKeywordValueError(f"Unterminated string value {value!r}.")
        return value[1:-1].replace("''", "'").rstrip()
    if value == "T":
        return True
    if value == "F":
        return False
    if _INT_RE.fullmatch(value):
        return int(value)
    if _FLOAT_RE.fullmatch(value):
        return float(value.replace("D", "E").replace("d", "e"))
    raise InvalidKeywordValueError(f"Cannot interpret header value {value!r}.")
