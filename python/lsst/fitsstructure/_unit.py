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

__all__ = ("StructureUnit",)

import math
from functools import cached_property

import numpy as np

from ._dtypes import PixelDataType
from ._errors import (
    InvalidAxisCountError,
    InvalidAxisIndexError,
    InvalidKeywordValueError,
    ShapeMismatchError,
)
from ._header import Header, scan_header
from ._pixels import decode_2d, decode_flat, decode_nd
from ._records import BLOCK_SIZE, interpret_value
from ._statistics import LayerStatistics, compute_statistics

MAX_AXES = 999


class StructureUnit:
    """One Header/Data Unit (HDU) of a FITS file.

    Parameters
    ----------
    view
        Bytes from the first header block of this unit to the end of the
        file.  A `memoryview` is used so that slicing never copies.
    offset, optional
        Byte offset of ``view`` within the file.
    strict, optional
        Whether to reject header records holding characters outside the
        printable ASCII range.

    Notes
    -----
    The header is scanned on first access and cached; all other quantities
    are derived from it.  Byte ranges returned by methods of this class are
    relative to the start of the unit, not the file.
    """

    def __init__(self, view: memoryview | bytes, offset: int = 0, *, strict: bool = False):
        self._view = memoryview(view)
        self._offset = offset
        self._strict = strict

    @property
    def offset(self) -> int:
        """Byte offset of this unit within the file."""
        return self._offset

    @cached_property
    def header(self) -> Header:
        """The scanned header of this unit."""
        return scan_header(self._view, offset=self._offset, strict=self._strict)

    def require_header_value(self, keyword: str) -> str:
        """Return the value string of a keyword.

        Raises
        ------
        MissingKeywordError
            Raised if the keyword is absent.
        """
        return self.header.require(keyword)

    def _require_int(self, keyword: str) -> int:
        value = self.require_header_value(keyword)
        try:
            return int(value)
        except ValueError:
            raise InvalidKeywordValueError(
                f"Value {value!r} of {keyword} in the structure at byte {self._offset} is not an integer."
            ) from None

    def _optional_int(self, keyword: str, default: int) -> int:
        if keyword not in self.header:
            return default
        return self._require_int(keyword)

    def header_block_count(self) -> int:
        """Return the number of 2880-byte blocks in the header."""
        return self.header.block_count

    @cached_property
    def _axis_count(self) -> int:
        value = self.require_header_value("NAXIS")
        try:
            count = int(value)
        except ValueError:
            raise InvalidAxisCountError(
                f"NAXIS value {value!r} in the structure at byte {self._offset} is not an integer."
            ) from None
        if not (0 <= count <= MAX_AXES):
            raise InvalidAxisCountError(
                f"NAXIS value {count} in the structure at byte {self._offset} is not in [0, {MAX_AXES}]."
            )
        return count

    def axis_count(self) -> int:
        """Return the number of axes (``NAXIS``).

        Raises
        ------
        MissingKeywordError
            Raised if ``NAXIS`` is absent.
        InvalidAxisCountError
            Raised if ``NAXIS`` is not an integer in [0, 999].
        """
        return self._axis_count

    def axis_length(self, index: int) -> int:
        """Return the length of an axis (``NAXIS<index>``).

        Parameters
        ----------
        index
            One-based axis index, as in the keyword name.

        Raises
        ------
        InvalidAxisIndexError
            Raised if the unit has no axes or ``index`` is not in
            ``[1, NAXIS]``.
        """
        count = self.axis_count()
        if count <= 0:
            raise InvalidAxisIndexError(
                f"Cannot get the length of axis {index} of the structure at byte {self._offset}, "
                f"which has {count} axes."
            )
        if not (1 <= index <= count):
            raise InvalidAxisIndexError(
                f"Axis index {index} is not in [1, {count}] for the structure at byte {self._offset}."
            )
        length = self._require_int(f"NAXIS{index}")
        if length < 0:
            raise InvalidKeywordValueError(
                f"NAXIS{index} value {length} in the structure at byte {self._offset} is negative."
            )
        return length

    def axis_lengths(self) -> tuple[int, ...]:
        """Return the lengths of all axes, ``(NAXIS1, NAXIS2, ...)``."""
        return tuple(self.axis_length(i) for i in range(1, self.axis_count() + 1))

    @property
    def shape(self) -> tuple[int, ...]:
        """Numpy-ordered shape of the data array, ``(..., NAXIS2, NAXIS1)``."""
        return tuple(reversed(self.axis_lengths()))

    def pixel_encoding(self) -> PixelDataType:
        """Return the pixel encoding declared by ``BITPIX``.

        Raises
        ------
        MissingKeywordError
            Raised if ``BITPIX`` is absent.
        InvalidPixelEncodingError
            Raised if ``BITPIX`` is not a valid code.
        """
        return PixelDataType.from_bitpix(self.require_header_value("BITPIX"))

    def sample_count(self) -> int:
        """Return the number of samples in the data array (the product of the
        axis lengths, or zero if there are no axes).
        """
        if self.axis_count() == 0:
            return 0
        return math.prod(self.axis_lengths())

    @cached_property
    def _data_size(self) -> int:
        if self.axis_count() == 0:
            return 0
        # PCOUNT and GCOUNT default to the values required for image HDUs;
        # binary tables use PCOUNT for the size of their heap.
        pcount = self._optional_int("PCOUNT", 0)
        gcount = self._optional_int("GCOUNT", 1)
        return self.pixel_encoding().bytes_per_sample * gcount * (pcount + self.sample_count())

    def data_size(self) -> int:
        """Return the size of the data in bytes, excluding block padding."""
        return self._data_size

    def data_block_count(self) -> int:
        """Return the number of 2880-byte blocks in the data."""
        return math.ceil(self.data_size() / BLOCK_SIZE)

    def data_byte_range(self) -> tuple[int, int]:
        """Return the ``(start, end)`` byte range of the padded data blocks,
        relative to the start of the unit.

        The range is empty when the unit has no axes.
        """
        start = self.header_block_count() * BLOCK_SIZE
        return start, start + self.data_block_count() * BLOCK_SIZE

    def next_unit_offset(self) -> int:
        """Return the byte offset of the next unit, relative to the start of
        this one.
        """
        return (self.header_block_count() + self.data_block_count()) * BLOCK_SIZE

    def successor(self) -> StructureUnit | None:
        """Return the unit that follows this one, or `None` if no bytes remain
        after this unit's data.
        """
        start = self.next_unit_offset()
        if start >= len(self._view):
            return None
        return StructureUnit(self._view[start:], self._offset + start, strict=self._strict)

    def data_bytes(self) -> memoryview:
        """Return the bytes of the data array, without block padding.

        A truncated file yields fewer bytes than the header declares; decoding
        them then raises `ShapeMismatchError`.
        """
        start, _ = self.data_byte_range()
        return self._view[start : start + self.pixel_encoding().bytes_per_sample * self.sample_count()]

    def decode_flat(self) -> np.ndarray:
        """Decode the data array into a 1-d array of samples in file order."""
        if self.axis_count() == 0:
            return np.empty(0, dtype=self.pixel_encoding().to_numpy())
        data = self.data_bytes()
        samples = decode_flat(data, self.pixel_encoding())
        if samples.size != self.sample_count():
            raise ShapeMismatchError(
                f"Structure at byte {self._offset} declares {self.sample_count()} samples, "
                f"but only {samples.size} are present."
            )
        return samples

    def decode_2d(self) -> np.ndarray:
        """Decode the data array into a 2-d array of shape
        ``(NAXIS2, NAXIS1)``.
        """
        return decode_2d(
            self.data_bytes(), self.pixel_encoding(), self.axis_length(1), self.axis_length(2)
        )

    def decode(self) -> np.ndarray:
        """Decode the data array into an array of shape
        ``(..., NAXIS2, NAXIS1)``.
        """
        if self.axis_count() == 0:
            return self.decode_flat()
        return decode_nd(self.data_bytes(), self.pixel_encoding(), self.axis_lengths())

    def statistics(self) -> LayerStatistics:
        """Compute statistics over all samples of the data array.

        Raises
        ------
        EmptyInputError
            Raised if the unit has no samples, or if every sample is NaN.
        """
        return compute_statistics(self.decode_flat())

    def is_image_extension(self) -> bool:
        """Test whether this is an image extension.

        This is a heuristic: it is `True` whenever the ``XTENSION`` value
        contains ``image`` in any case, and `False` if ``XTENSION`` is absent
        (as it is for the primary unit).
        """
        xtension = self.header.get("XTENSION")
        return xtension is not None and "image" in xtension.lower()

    def reference_pixel(self) -> tuple[float, float]:
        """Return the WCS reference pixel ``(CRPIX1, CRPIX2)``.

        Raises
        ------
        MissingKeywordError
            Raised if either keyword is absent.
        InvalidKeywordValueError
            Raised if either value is not a number.
        """
        result = []
        for keyword in ("CRPIX1", "CRPIX2"):
            value = interpret_value(self.require_header_value(keyword))
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise InvalidKeywordValueError(
                    f"Value {value!r} of {keyword} in the structure at byte {self._offset} is not a number."
                )
            result.append(float(value))
        return result[0], result[1]

    def __repr__(self) -> str:
        return f"StructureUnit(offset={self._offset})"
