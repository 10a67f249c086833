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

__all__ = ("StructureChain", "UnitDescriptor")

import threading
from collections.abc import Iterator, Sequence
from functools import cached_property
from logging import getLogger
from typing import overload

import pydantic

from lsst.resources import ResourcePathExpression

from ._errors import EmptyInputError, IndexOutOfRangeError, InvalidPixelEncodingError, MissingKeywordError
from ._io import load_bytes
from ._options import ReadOptions
from ._statistics import LayerStatistics
from ._unit import StructureUnit

_LOG = getLogger(__name__)


class UnitDescriptor(pydantic.BaseModel):
    """A summary of where one structure lives in a file and what it holds."""

    model_config = pydantic.ConfigDict(frozen=True)

    index: int
    """Position of the structure in the chain (the primary unit is 0)."""

    offset: int
    """Byte offset of the first header block within the file."""

    header_size: int
    """Size of the header in bytes, including padding."""

    data_size: int
    """Size of the data in bytes, excluding padding."""

    xtension: str | None = None
    """Raw value of ``XTENSION``, or `None` for the primary unit."""

    bitpix: int | None = None
    """Value of ``BITPIX``, if it is valid."""

    shape: list[int] = pydantic.Field(default_factory=list)
    """Numpy-ordered shape of the data array; empty if there is no data."""


class StructureChain(Sequence[StructureUnit]):
    """All structures of a FITS file, in file order.

    Instances should usually be constructed via `load` or `from_file`.

    Parameters
    ----------
    units
        The units of the file, starting with the primary unit.
    options, optional
        Options used to read the units.

    Notes
    -----
    Index 0 is always the primary unit; extensions follow from index 1.  The
    same indexing is used by `unit_at`, `image_units` and
    `layer_statistics`.
    """

    def __init__(self, units: Sequence[StructureUnit], options: ReadOptions = ReadOptions.DEFAULT):
        self._units = tuple(units)
        self._options = options
        self._statistics: dict[int, LayerStatistics] = {}
        self._statistics_lock = threading.Lock()

    @classmethod
    def load(
        cls, data: bytes | bytearray | memoryview, options: ReadOptions = ReadOptions.DEFAULT
    ) -> StructureChain:
        """Walk every structure in an in-memory FITS file.

        Parameters
        ----------
        data
            Complete contents of the file.
        options, optional
            Options controlling how the file is read.

        Returns
        -------
        chain
            The structures of the file.

        Raises
        ------
        FitsFormatError
            Raised if any structure's header or size keywords are invalid.
        """
        view = memoryview(data)
        units: list[StructureUnit] = []
        unit: StructureUnit | None = StructureUnit(view, 0, strict=options.strict_characters)
        while unit is not None:
            # Scanning the header here, rather than lazily, surfaces format
            # errors at load time.
            _LOG.debug(
                "Found structure %d at byte %d with %d header blocks and %d data blocks.",
                len(units),
                unit.offset,
                unit.header_block_count(),
                unit.data_block_count(),
            )
            units.append(unit)
            unit = unit.successor()
        chain = cls(units, options)
        if options.precompute_statistics:
            for index, unit in enumerate(chain):
                if unit.sample_count():
                    try:
                        chain.layer_statistics(index)
                    except EmptyInputError:
                        _LOG.debug("Structure %d holds only NaN samples; no statistics cached.", index)
        return chain

    @classmethod
    def from_file(
        cls, path: ResourcePathExpression, options: ReadOptions = ReadOptions.DEFAULT
    ) -> StructureChain:
        """Read a FITS file and walk every structure in it.

        Parameters
        ----------
        path
            File to read; convertible to `lsst.resources.ResourcePath`.
        options, optional
            Options controlling how the file is read.

        Raises
        ------
        IOFailureError
            Raised if the file cannot be read.
        FitsFormatError
            Raised if the file's structures are invalid.
        """
        return cls.load(load_bytes(path), options)

    @property
    def primary(self) -> StructureUnit:
        """The primary unit."""
        return self._units[0]

    @property
    def options(self) -> ReadOptions:
        """Options used to read the units."""
        return self._options

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[StructureUnit]:
        return iter(self._units)

    @overload
    def __getitem__(self, index: int) -> StructureUnit: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[StructureUnit]: ...

    def __getitem__(self, index: int | slice) -> StructureUnit | Sequence[StructureUnit]:
        if isinstance(index, slice):
            return self._units[index]
        try:
            return self._units[index]
        except IndexError:
            raise IndexOutOfRangeError(
                f"Structure index {index} is out of range for a file with {len(self._units)} structures."
            ) from None

    def unit_at(self, index: int) -> StructureUnit:
        """Return the unit at a position in the chain.

        Unlike indexing with ``[]``, negative indices are rejected.

        Raises
        ------
        IndexOutOfRangeError
            Raised if ``index`` is not in ``[0, len(self))``.
        """
        if not (0 <= index < len(self._units)):
            raise IndexOutOfRangeError(
                f"Structure index {index} is out of range for a file with {len(self._units)} structures."
            )
        return self._units[index]

    @cached_property
    def _image_units(self) -> tuple[StructureUnit, ...]:
        return tuple(unit for unit in self._units if unit.is_image_extension())

    def image_units(self) -> Sequence[StructureUnit]:
        """Return the image extensions, in file order.

        See `StructureUnit.is_image_extension` for how these are identified.
        """
        return self._image_units

    def layer_statistics(self, index: int) -> LayerStatistics:
        """Return statistics over the data of the unit at a position in the
        chain.

        Results are computed on first access and cached until
        `invalidate_statistics` is called.

        Raises
        ------
        IndexOutOfRangeError
            Raised if ``index`` is not in ``[0, len(self))``.
        EmptyInputError
            Raised if the unit has no samples, or if every sample is NaN.
        """
        if (cached := self._statistics.get(index)) is not None:
            return cached
        unit = self.unit_at(index)
        with self._statistics_lock:
            if (cached := self._statistics.get(index)) is None:
                cached = unit.statistics()
                self._statistics[index] = cached
        return cached

    def invalidate_statistics(self, index: int | None = None) -> None:
        """Drop cached statistics for one unit, or for all units if ``index``
        is `None`.
        """
        with self._statistics_lock:
            if index is None:
                self._statistics.clear()
            else:
                self._statistics.pop(index, None)

    def describe(self) -> list[UnitDescriptor]:
        """Return a descriptor for every unit, in file order."""
        result = []
        for index, unit in enumerate(self._units):
            try:
                bitpix: int | None = unit.pixel_encoding().value
            except (MissingKeywordError, InvalidPixelEncodingError):
                bitpix = None
            result.append(
                UnitDescriptor(
                    index=index,
                    offset=unit.offset,
                    header_size=unit.header.size,
                    data_size=unit.data_size(),
                    xtension=unit.header.get("XTENSION"),
                    bitpix=bitpix,
                    shape=list(unit.shape),
                )
            )
        return result

    def __repr__(self) -> str:
        return f"StructureChain(<{len(self._units)} structures>)"
