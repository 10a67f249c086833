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

__all__ = ("ReadOptions",)

import dataclasses
from typing import ClassVar


@dataclasses.dataclass(frozen=True)
class ReadOptions:
    """Configuration options for reading a chain of FITS structures."""

    strict_characters: bool = False
    """Whether to reject header records holding characters outside the
    printable ASCII range (decimal 32 through 126).

    The format forbids such characters, but many writers in the wild emit
    them in commentary cards, so the default is to accept them.
    """

    precompute_statistics: bool = False
    """Whether to compute statistics for every structure with data when the
    chain is loaded, instead of on first access.
    """

    DEFAULT: ClassVar[ReadOptions]
    """Default options (lenient characters, lazy statistics)."""


ReadOptions.DEFAULT = ReadOptions()
