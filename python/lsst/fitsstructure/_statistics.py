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

__all__ = ("LayerStatistics", "compute_statistics", "select_median")

import numpy as np
import numpy.typing as npt
import pydantic

from ._errors import EmptyInputError


class LayerStatistics(pydantic.BaseModel):
    """Summary statistics over the samples of one structure."""

    model_config = pydantic.ConfigDict(frozen=True)

    min: float
    """Smallest sample."""

    max: float
    """Largest sample."""

    mean: float
    """Arithmetic mean of the samples."""

    std_dev: float
    """Population standard deviation (not the sample standard deviation)."""

    median: float
    """Median, as chosen by `select_median`."""


def select_median(sorted_samples: np.ndarray) -> float:
    """Return the median of an ascending-sorted 1-d array.

    This is the element at index ``len // 2``, with no averaging; for even
    lengths that is the upper of the two middle elements.
    """
    return float(sorted_samples[sorted_samples.size // 2])


def compute_statistics(samples: npt.ArrayLike) -> LayerStatistics:
    """Compute summary statistics over an array of samples.

    Parameters
    ----------
    samples
        Samples of any shape; they are flattened first.

    Returns
    -------
    statistics
        The minimum, maximum, mean, population standard deviation and median
        of the samples.  NaN samples (the usual blank value of floating-point
        images) are ignored by every statistic.

    Raises
    ------
    EmptyInputError
        Raised if there are no samples, or if every sample is NaN.
    """
    array = np.asarray(samples).ravel()
    if array.size == 0:
        raise EmptyInputError("Cannot compute statistics over zero samples.")
    # Accumulate in float64 so that integer sums cannot overflow.
    values = array.astype(np.float64)
    values = values[~np.isnan(values)]
    if values.size == 0:
        raise EmptyInputError(f"All {array.size} samples are NaN.")
    mean = values.sum() / values.size
    std_dev = np.sqrt(np.square(values - mean).sum() / values.size)
    return LayerStatistics(
        min=float(values.min()),
        max=float(values.max()),
        mean=float(mean),
        std_dev=float(std_dev),
        median=select_median(np.sort(values)),
    )
