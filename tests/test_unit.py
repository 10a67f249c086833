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

import unittest

import numpy as np

from lsst.fitsstructure import (
    BLOCK_SIZE,
    EmptyInputError,
    InvalidAxisCountError,
    InvalidAxisIndexError,
    InvalidKeywordValueError,
    InvalidPixelEncodingError,
    MissingKeywordError,
    PixelDataType,
    ShapeMismatchError,
    StructureUnit,
)
from lsst.fitsstructure.tests import make_header_bytes, make_record, make_unit_bytes


class StructureUnitTestCase(unittest.TestCase):
    """Tests for StructureUnit."""

    def test_no_data(self) -> None:
        """Test a unit with NAXIS = 0."""
        unit = StructureUnit(make_unit_bytes())
        self.assertEqual(unit.axis_count(), 0)
        self.assertEqual(unit.data_size(), 0)
        self.assertEqual(unit.data_block_count(), 0)
        self.assertEqual(unit.header_block_count(), 1)
        start, end = unit.data_byte_range()
        self.assertEqual(start, end)
        self.assertEqual(start, BLOCK_SIZE)
        self.assertEqual(unit.next_unit_offset(), BLOCK_SIZE)
        self.assertEqual(unit.shape, ())
        self.assertEqual(unit.sample_count(), 0)
        self.assertEqual(unit.decode_flat().size, 0)
        self.assertEqual(len(unit.data_bytes()), 0)
        self.assertIsNone(unit.successor())
        with self.assertRaises(InvalidAxisIndexError):
            unit.axis_length(1)
        with self.assertRaises(EmptyInputError):
            unit.statistics()

    def test_image(self) -> None:
        array = np.arange(12, dtype=np.int16).reshape(3, 4) - 6
        unit = StructureUnit(make_unit_bytes(array, extension="IMAGE"))
        self.assertEqual(unit.axis_count(), 2)
        self.assertEqual(unit.axis_length(1), 4)
        self.assertEqual(unit.axis_length(2), 3)
        self.assertEqual(unit.axis_lengths(), (4, 3))
        self.assertEqual(unit.shape, (3, 4))
        self.assertEqual(unit.pixel_encoding(), PixelDataType.SIGNED_16)
        self.assertEqual(unit.data_size(), 24)
        self.assertEqual(unit.data_block_count(), 1)
        self.assertEqual(unit.data_byte_range(), (BLOCK_SIZE, 2 * BLOCK_SIZE))
        self.assertEqual(unit.next_unit_offset(), 2 * BLOCK_SIZE)
        self.assertEqual(len(unit.data_bytes()), 24)
        np.testing.assert_array_equal(unit.decode_flat(), array.ravel())
        np.testing.assert_array_equal(unit.decode_2d(), array)
        np.testing.assert_array_equal(unit.decode(), array)
        self.assertTrue(unit.is_image_extension())
        stats = unit.statistics()
        self.assertEqual(stats.min, -6.0)
        self.assertEqual(stats.max, 5.0)
        with self.assertRaises(InvalidAxisIndexError):
            unit.axis_length(3)
        with self.assertRaises(InvalidAxisIndexError):
            unit.axis_length(0)

    def test_cube(self) -> None:
        array = np.random.default_rng(3).normal(size=(2, 3, 5))
        unit = StructureUnit(make_unit_bytes(array.astype(np.float64)))
        self.assertEqual(unit.axis_lengths(), (5, 3, 2))
        np.testing.assert_array_equal(unit.decode(), array)
        with self.assertRaises(ShapeMismatchError):
            # A 2-d view of a 3-d array has the wrong number of samples.
            unit.decode_2d()

    def test_multi_block_data(self) -> None:
        array = np.arange(1000, dtype=np.int32)
        unit = StructureUnit(make_unit_bytes(array, extension="IMAGE"))
        self.assertEqual(unit.data_size(), 4000)
        self.assertEqual(unit.data_block_count(), 2)
        self.assertEqual(unit.next_unit_offset(), 3 * BLOCK_SIZE)
        np.testing.assert_array_equal(unit.decode(), array)

    def test_bitpix_8_range(self) -> None:
        array = np.arange(256, dtype=np.uint8).reshape(16, 16)
        samples = StructureUnit(make_unit_bytes(array)).decode_flat()
        self.assertTrue(((samples >= 0) & (samples <= 255)).all())
        self.assertEqual(samples.tolist(), list(range(256)))

    def test_successor(self) -> None:
        first = make_unit_bytes()
        second = make_unit_bytes(np.ones((2, 2), dtype=np.float32), extension="IMAGE")
        unit = StructureUnit(first + second)
        nxt = unit.successor()
        assert nxt is not None
        self.assertEqual(nxt.offset, BLOCK_SIZE)
        self.assertEqual(nxt.pixel_encoding(), PixelDataType.FLOAT_32)
        self.assertIsNone(nxt.successor())
        self.assertIn("offset=2880", repr(nxt))

    def test_header_cached(self) -> None:
        unit = StructureUnit(make_unit_bytes())
        self.assertIs(unit.header, unit.header)

    def test_missing_keywords(self) -> None:
        unit = StructureUnit(make_header_bytes([make_record("SIMPLE", True)]))
        with self.assertRaises(MissingKeywordError) as cm:
            unit.axis_count()
        self.assertEqual(cm.exception.keyword, "NAXIS")
        with self.assertRaises(MissingKeywordError):
            unit.pixel_encoding()
        with self.assertRaises(MissingKeywordError):
            unit.require_header_value("OBJECT")
        unit = StructureUnit(make_header_bytes([make_record("BITPIX", 8), make_record("NAXIS", 1)]))
        with self.assertRaisesRegex(MissingKeywordError, "NAXIS1"):
            unit.axis_length(1)

    def test_invalid_axis_count(self) -> None:
        for value in (-1, 1000, "'two'", 2.5):
            unit = StructureUnit(make_header_bytes([make_record("BITPIX", 8), make_record("NAXIS", value)]))
            with self.assertRaises(InvalidAxisCountError):
                unit.axis_count()
        unit = StructureUnit(make_header_bytes([make_record("BITPIX", 8), make_record("NAXIS", 999)]))
        self.assertEqual(unit.axis_count(), 999)

    def test_invalid_axis_length(self) -> None:
        for value in (-4, "'x'"):
            records = [make_record("BITPIX", 8), make_record("NAXIS", 1), make_record("NAXIS1", value)]
            unit = StructureUnit(make_header_bytes(records))
            with self.assertRaises(InvalidKeywordValueError):
                unit.axis_length(1)

    def test_invalid_bitpix(self) -> None:
        unit = StructureUnit(make_header_bytes([make_record("BITPIX", 12), make_record("NAXIS", 0)]))
        with self.assertRaises(InvalidPixelEncodingError):
            unit.pixel_encoding()

    def test_truncated_data(self) -> None:
        data = make_unit_bytes(np.arange(10, dtype=np.int16), extension="IMAGE")
        unit = StructureUnit(data[: BLOCK_SIZE + 7])
        self.assertIsNone(unit.successor())
        with self.assertRaises(ShapeMismatchError):
            unit.decode_flat()
        with self.assertRaises(ShapeMismatchError):
            unit.decode()

    def test_pcount_gcount(self) -> None:
        """Test that a binary table heap is counted in the data size."""
        records = [
            make_record("XTENSION", "BINTABLE"),
            make_record("BITPIX", 8),
            make_record("NAXIS", 2),
            make_record("NAXIS1", 8),
            make_record("NAXIS2", 100),
            make_record("PCOUNT", 3000),
            make_record("GCOUNT", 1),
        ]
        unit = StructureUnit(make_header_bytes(records) + bytes(BLOCK_SIZE * 2))
        self.assertEqual(unit.sample_count(), 800)
        self.assertEqual(unit.data_size(), 3800)
        self.assertEqual(unit.data_block_count(), 2)
        self.assertFalse(unit.is_image_extension())
        self.assertEqual(unit.decode_flat().size, 800)

    def test_is_image_extension(self) -> None:
        self.assertFalse(StructureUnit(make_unit_bytes()).is_image_extension())
        for xtension, expected in [("IMAGE", True), ("image", True), ("IUEIMAGE", True), ("TABLE", False)]:
            unit = StructureUnit(make_unit_bytes(extension=xtension))
            self.assertEqual(unit.is_image_extension(), expected, xtension)

    def test_reference_pixel(self) -> None:
        unit = StructureUnit(
            make_unit_bytes(extra=[make_record("CRPIX1", 512.5), make_record("CRPIX2", 100)])
        )
        self.assertEqual(unit.reference_pixel(), (512.5, 100.0))
        with self.assertRaises(MissingKeywordError):
            StructureUnit(make_unit_bytes(extra=[make_record("CRPIX1", 1.0)])).reference_pixel()
        unit = StructureUnit(make_unit_bytes(extra=[make_record("CRPIX1", "a"), make_record("CRPIX2", 1)]))
        with self.assertRaises(InvalidKeywordValueError):
            unit.reference_pixel()


if __name__ == "__main__":
    unittest.main()
