"""
Reference dataset materialization.

For each size, the rounded input signal is written to ``inputs/{size}.dat``
(and optionally the rounded reference output to ``outputs/{size}.dat``), and
the rounded reference output is returned for in-memory comparison.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable

from .config import INPUT_PRECISION
from .exceptions import DatasetIOError, InvalidSizeError
from .generator import generate_signal
from .transform import reference_transform
from .utils import Signal, format_samples, is_power_of_two, parse_samples, round_half_away

logger = logging.getLogger(__name__)

INPUTS_DIR = "inputs"
OUTPUTS_DIR = "outputs"


def dataset_path(data_dir: Path, size: int, kind: str = INPUTS_DIR) -> Path:
    return Path(data_dir) / kind / f"{size}.dat"


def write_dataset(path: Path, samples: Signal, precision: int = INPUT_PRECISION) -> None:
    """
    Write one ``re,im`` line per sample, creating parent directories as needed.

    The file is written to a temporary sibling and renamed into place, so a
    failed write never leaves a partial ``.dat`` behind.

    Raises
    ------
    DatasetIOError
        On any filesystem failure, naming the path and operation
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DatasetIOError("create directory", path.parent, exc) from exc

    tmp = path.with_name(path.name + ".tmp")
    try:
        with open(tmp, "w", encoding="utf-8", newline="\n") as fout:
            for line in format_samples(samples, precision):
                fout.write(line + "\n")
            fout.flush()
            os.fsync(fout.fileno())
        os.replace(tmp, path)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise DatasetIOError("write", path, exc) from exc


def load_dataset(path: Path) -> Signal:
    """Read a ``.dat`` file back into a complex128 array."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise DatasetIOError("read", path, exc) from exc
    return parse_samples(text)


def materialize_dataset(
    data_dir: Path,
    size: int,
    output_files: bool = False,
    precision: int = INPUT_PRECISION,
) -> Signal:
    """
    Generate, round and persist the reference data for one size.

    Parameters
    ----------
    data_dir : Path
        Root of the data tree (``inputs/`` and ``outputs/`` are created below it)
    size : int
        Transform size; must be a power of two
    output_files : bool
        Also write the rounded reference output to ``outputs/{size}.dat``
    precision : int
        Fractional digits for rounding and text

    Returns
    -------
    ndarray of complex128
        The rounded reference transform of the rounded input

    Raises
    ------
    InvalidSizeError
        Before any I/O, if size is not a power of two
    DatasetIOError
        If a directory or file cannot be written
    """
    if not is_power_of_two(size):
        raise InvalidSizeError(size)
    logger.info("generating test data where size=%s", size)

    inputs = round_half_away(generate_signal(size), precision)
    write_dataset(dataset_path(data_dir, size, INPUTS_DIR), inputs, precision)

    outputs = round_half_away(reference_transform(inputs), precision)
    if output_files:
        write_dataset(dataset_path(data_dir, size, OUTPUTS_DIR), outputs, precision)

    return outputs


def generate_datasets(
    data_dir: Path,
    sizes: Iterable[int],
    output_files: bool = False,
    precision: int = INPUT_PRECISION,
) -> Dict[int, Signal]:
    """
    Build the reference set ``{size: rounded reference output}``.

    Sizes are validated up front and materialized in ascending order; the
    returned dict iterates in that order.
    """
    sizes = sorted(set(sizes))
    for size in sizes:
        if not is_power_of_two(size):
            raise InvalidSizeError(size)
    return {size: materialize_dataset(data_dir, size, output_files, precision) for size in sizes}
