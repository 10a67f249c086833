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
    "NumberType",
    "NumericDomain",
    "PixelDataType",
)

import enum

import numpy as np
import numpy.typing as npt

from ._errors import InvalidPixelEncodingError


class NumberType(enum.StrEnum):
    """Enumeration of the array value types a FITS primary array or image
    extension can hold without scaling.
    """

    uint8 = enum.auto()
    int16 = enum.auto()
    int32 = enum.auto()
    int64 = enum.auto()
    float32 = enum.auto()
    float64 = enum.auto()

    def to_numpy(self) -> type:
        """Convert an enumeration member to the corresponding numpy scalar
        type object.

        Returns
        -------
        scalar_type
            Numpy scalar type, e.g. `numpy.int16`.  Note that this inherits
            from `type`, not `numpy.dtype` (though a `numpy.dtype` instance
            can always be constructed from it).
        """
        return getattr(np, self.value)

    @classmethod
    def from_numpy(cls, dtype: npt.DTypeLike) -> NumberType:
        """Construct an enumeration member from anything that can be coerced
        to `numpy.dtype`.

        Byte order is ignored, so ``">i4"`` and ``"<i4"`` both map to
        `int32`.
        """
        return cls(np.dtype(dtype).name)


class NumericDomain(enum.StrEnum):
    """The numeric domain of a pixel encoding."""

    UNSIGNED_INTEGER = "unsigned integer"
    SIGNED_INTEGER = "signed integer"
    FLOAT = "float"


class PixelDataType(enum.IntEnum):
    """Enumeration of the valid ``BITPIX`` values.

    Member values are the ``BITPIX`` codes themselves; the absolute value is
    the number of bits per sample.
    """

    UNSIGNED_8 = 8
    SIGNED_16 = 16
    SIGNED_32 = 32
    SIGNED_64 = 64
    FLOAT_32 = -32
    FLOAT_64 = -64

    @classmethod
    def from_bitpix(cls, value: int | str) -> PixelDataType:
        """Look up the member for a ``BITPIX`` value.

        Parameters
        ----------
        value
            The ``BITPIX`` value, either as an `int` or as the raw header
            value string.

        Raises
        ------
        InvalidPixelEncodingError
            Raised if the value is not an integer or not one of the values
            the format allows.
        """
        try:
            code = int(str(value).strip())
        except ValueError:
            raise InvalidPixelEncodingError(f"BITPIX value {value!r} is not an integer.") from None
        try:
            return cls(code)
        except ValueError:
            raise InvalidPixelEncodingError(
                f"Invalid BITPIX value {code}; expected one of {[m.value for m in cls]}."
            ) from None

    @classmethod
    def from_numpy(cls, dtype: npt.DTypeLike) -> PixelDataType:
        """Return the member that can hold an array of the given dtype."""
        return _BY_NUMBER_TYPE[NumberType.from_numpy(dtype)]

    @property
    def bits(self) -> int:
        """Number of bits per sample."""
        return abs(self.value)

    @property
    def bytes_per_sample(self) -> int:
        """Number of bytes per sample."""
        return abs(self.value) // 8

    @property
    def domain(self) -> NumericDomain:
        """Numeric domain of the samples."""
        if self.value < 0:
            return NumericDomain.FLOAT
        if self.value == 8:
            return NumericDomain.UNSIGNED_INTEGER
        return NumericDomain.SIGNED_INTEGER

    @property
    def number_type(self) -> NumberType:
        """The in-memory number type of decoded samples."""
        match self.domain:
            case NumericDomain.UNSIGNED_INTEGER:
                return NumberType(f"uint{self.bits}")
            case NumericDomain.SIGNED_INTEGER:
                return NumberType(f"int{self.bits}")
            case NumericDomain.FLOAT:
                return NumberType(f"float{self.bits}")
        raise AssertionError("Invalid enum value.")

    def to_numpy(self) -> np.dtype:
        """Return the big-endian numpy dtype that matches the on-disk layout
        of this encoding.
        """
        return np.dtype(self.number_type.to_numpy()).newbyteorder(">")


_BY_NUMBER_TYPE = {member.number_type: member for member in PixelDataType}
