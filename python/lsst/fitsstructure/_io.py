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

__all__ = ("load_bytes",)

from lsst.resources import ResourcePath, ResourcePathExpression

from ._errors import IOFailureError


def load_bytes(path: ResourcePathExpression) -> bytes:
    """Read the complete contents of a file into memory.

    Parameters
    ----------
    path
        File to read; convertible to `lsst.resources.ResourcePath`, so local
        paths and any URI scheme it supports are accepted.

    Returns
    -------
    data
        The raw bytes of the file.

    Raises
    ------
    IOFailureError
        Raised if the file cannot be read.  The original exception is chained.
    """
    try:
        return ResourcePath(path).read()
    except Exception as err:
        raise IOFailureError(f"Unable to load {path!r}: {err}") from err
