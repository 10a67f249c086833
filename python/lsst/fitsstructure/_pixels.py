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

"""Decoding of raw data bytes into numpy arrays.

All multi-byte samples in FITS are big-endian.  Decoded arrays keep the
big-endian dtype and are views into the original buffer (read-only when the
buffer is immutable); call ``astype`` on them if a native-order or writeable
copy is needed.
"""

from __future__ import annotations

__all__ = ("decode_2d", "decode_flat", "decode_nd")

import math
from collections.abc import Sequence
from typing import TypeAlias

import numpy as np

from ._dtypes import PixelDataType
from ._errors import ShapeMismatchError, UnsupportedEncodingError

DataBytes: TypeAlias = bytes | bytearray | memoryview


def _require_encoding(encoding: object) -> PixelDataType:
    # PixelDataType is an IntEnum, so plain ints with a valid code would
    # otherwise pass an isinstance check on int.
    if isinstance(encoding, PixelDataType):
        return encoding
    raise UnsupportedEncodingError(f"Unsupported pixel encoding {encoding!r}.")


def decode_flat(data: DataBytes, encoding: PixelDataType) -> np.ndarray:
    """Decode a byte range into a 1-d array of samples.

    Parameters
    ----------
    data
        Raw sample bytes.
    encoding
        Pixel encoding of the samples.

    Returns
    -------
    samples
        1-d read-only array with one element per ``encoding.bytes_per_sample``
        bytes, in file order.

    Raises
    ------
    UnsupportedEncodingError
        Raised if ``encoding`` is not a `PixelDataType` member.
    ShapeMismatchError
        Raised if the number of bytes is not a multiple of the sample size.
    """
    encoding = _require_encoding(encoding)
    stride = encoding.bytes_per_sample
    if len(data) % stride:
        raise ShapeMismatchError(
            f"{len(data)} bytes cannot be decoded as {encoding.name} samples of {stride} bytes each."
        )
    return np.frombuffer(data, dtype=encoding.to_numpy())


def decode_nd(data: DataBytes, encoding: PixelDataType, axis_lengths: Sequence[int]) -> np.ndarray:
    """Decode a byte range into an N-d array.

    Parameters
    ----------
    data
        Raw sample bytes.
    encoding
        Pixel encoding of the samples.
    axis_lengths
        Lengths of the axes in FITS order, i.e. ``(NAXIS1, NAXIS2, ...)``,
        with the first axis varying fastest.

    Returns
    -------
    array
        Read-only array with shape ``(..., NAXIS2, NAXIS1)``.

    Raises
    ------
    ShapeMismatchError
        Raised if the number of samples is not the product of the axis
        lengths.
    """
    flat = decode_flat(data, encoding)
    expected = math.prod(axis_lengths)
    if flat.size != expected:
        raise ShapeMismatchError(
            f"Decoded {flat.size} samples, but axis lengths {tuple(axis_lengths)} require {expected}."
        )
    return flat.reshape(tuple(reversed(axis_lengths)))


def decode_2d(data: DataBytes, encoding: PixelDataType, width: int, height: int) -> np.ndarray:
    """Decode a byte range into a 2-d array of ``height`` rows of ``width``
    columns.
    """
    return decode_nd(data, encoding, (width, height))
