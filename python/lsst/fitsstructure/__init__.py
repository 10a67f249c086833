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

"""Decoding of the Header/Data Unit structure of FITS files.

A FITS file is a sequence of structures, each made of 2880-byte header
blocks holding 80-character records, followed by 2880-byte data blocks.
`StructureChain` walks every structure of a file; each `StructureUnit`
exposes its `Header`, the layout of its data and the decoded pixel array.
"""

from ._chain import *
from ._dtypes import *
from ._errors import *
from ._header import *
from ._io import *
from ._options import *
from ._pixels import *
from ._records import *
from ._statistics import *
from ._unit import *
