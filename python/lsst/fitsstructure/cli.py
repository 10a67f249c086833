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

"""Command-line interface for inspecting the structures of FITS files."""

from __future__ import annotations

__all__ = ("main",)

import logging
from logging import getLogger

import click
import pydantic

from ._chain import StructureChain, UnitDescriptor
from ._errors import EmptyInputError, FitsStructureError
from ._options import ReadOptions
from ._statistics import LayerStatistics

_LOG = getLogger(__name__)

_DESCRIPTORS_ADAPTER = pydantic.TypeAdapter(list[UnitDescriptor])
_STATISTICS_ADAPTER = pydantic.TypeAdapter(dict[str, LayerStatistics])


def _load(path: str, strict: bool) -> StructureChain:
    try:
        return StructureChain.from_file(path, ReadOptions(strict_characters=strict))
    except FitsStructureError as err:
        raise click.ClickException(str(err)) from err


@click.group("fitsstructure")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level for diagnostics.",
)
def main(log_level: str) -> None:
    """Inspect the Header/Data Units of FITS files."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@main.command("describe")
@click.argument("path")
@click.option("--strict", is_flag=True, help="Reject non-printable characters in headers.")
def describe(path: str, strict: bool) -> None:
    """Print a JSON summary of every structure in PATH."""
    chain = _load(path, strict)
    click.echo(_DESCRIPTORS_ADAPTER.dump_json(chain.describe(), indent=2).decode())


@main.command("header")
@click.argument("path")
@click.option("-i", "--index", default=0, show_default=True, help="Structure index (0 is the primary).")
@click.option("--strict", is_flag=True, help="Reject non-printable characters in headers.")
def header(path: str, index: int, strict: bool) -> None:
    """Print the header records of one structure in PATH."""
    chain = _load(path, strict)
    try:
        unit = chain.unit_at(index)
    except FitsStructureError as err:
        raise click.ClickException(str(err)) from err
    click.echo(str(unit.header))


@main.command("stats")
@click.argument("path")
@click.option("-i", "--index", type=int, default=None, help="Structure index (0 is the primary).")
@click.option("--images-only", is_flag=True, help="Only report image extensions.")
@click.option("--strict", is_flag=True, help="Reject non-printable characters in headers.")
def stats(path: str, index: int | None, images_only: bool, strict: bool) -> None:
    """Print JSON statistics for the structures in PATH that hold data."""
    chain = _load(path, strict)
    if index is not None:
        indices = [index]
    elif images_only:
        images = {id(unit) for unit in chain.image_units()}
        indices = [i for i, unit in enumerate(chain) if id(unit) in images]
    else:
        indices = [i for i, unit in enumerate(chain) if unit.sample_count()]
    result: dict[str, LayerStatistics] = {}
    for i in indices:
        try:
            result[str(i)] = chain.layer_statistics(i)
        except EmptyInputError:
            _LOG.info("Structure %d has no non-NaN samples; skipping.", i)
        except FitsStructureError as err:
            raise click.ClickException(str(err)) from err
    click.echo(_STATISTICS_ADAPTER.dump_json(result, indent=2).decode())
