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
    "EmptyInputError",
    "FitsFormatError",
    "FitsStructureError",
    "IOFailureError",
    "IndexOutOfRangeError",
    "InvalidAxisCountError",
    "InvalidAxisIndexError",
    "InvalidKeywordValueError",
    "InvalidPixelEncodingError",
    "MalformedRecordError",
    "MissingKeywordError",
    "MissingTerminatorError",
    "ShapeMismatchError",
    "UnsupportedEncodingError",
)


class FitsStructureError(Exception):
    """Base class for all errors raised by this package."""


class FitsFormatError(FitsStructureError, RuntimeError):
    """The error type raised when the bytes of a FITS file do not conform to
    the structure the format requires.
    """


class MalformedRecordError(FitsFormatError):
    """A header record is not exactly 80 characters, or (when strict checking
    is enabled) contains characters outside the printable ASCII range.
    """


class MissingTerminatorError(FitsFormatError):
    """Header scanning ran out of bytes before finding an ``END`` record."""


class MissingKeywordError(FitsFormatError):
    """A keyword required to interpret a structure is absent from its header.

    Parameters
    ----------
    keyword
        The keyword that was looked up.
    offset
        Byte offset of the structure within the file.
    """

    def __init__(self, keyword: str, offset: int = 0):
        self.keyword = keyword
        self.offset = offset
        super().__init__(f"Keyword {keyword!r} is missing from the header of the structure at byte {offset}.")


class InvalidKeywordValueError(FitsFormatError):
    """A keyword is present but its value cannot be interpreted."""


class InvalidAxisCountError(InvalidKeywordValueError):
    """``NAXIS`` is not an integer in [0, 999]."""


class InvalidAxisIndexError(FitsFormatError, IndexError):
    """An axis length was requested from a structure with no axes, or for an
    axis beyond ``NAXIS``.
    """


class InvalidPixelEncodingError(InvalidKeywordValueError):
    """``BITPIX`` is not one of the values the format allows."""


class UnsupportedEncodingError(FitsFormatError):
    """The pixel decoder was handed an encoding it does not know."""


class ShapeMismatchError(FitsFormatError):
    """The number of decoded samples does not match the declared shape."""


class EmptyInputError(FitsStructureError, ValueError):
    """Statistics were requested over zero samples."""


class IndexOutOfRangeError(FitsStructureError, IndexError):
    """A structure index is beyond the end of the chain."""


class IOFailureError(FitsStructureError, OSError):
    """The raw bytes of a file could not be loaded.

    The original exception is always chained as ``__cause__``.
    """
