"""Chamfer distance maps computed with two raster scans over a 3x3 neighbourhood.

Every foreground pixel of a binary raster receives the chamfer distance (in
weight units, or divided by the orthogonal weight when normalized) to the
nearest background pixel. The buffer starts at 0 on background and at the
largest value of its integer type on foreground, then is relaxed in place by
one forward scan (top-left to bottom-right) and one backward scan (the
reverse). Values only ever decrease.
"""
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional, Tuple

import numpy as np

from .mask import DEFAULT_LABEL, foreground_mask
from .weights import BORGEFORS, get_weights

ProgressCallback = Callable[[int, int], None]
StatusCallback = Callable[[str], None]
StopCallback = Callable[[], bool]


@dataclass
class DistanceMap:
    """Result of :func:`distance_map`.

    distances:   integer raster, 0 on background
    max_value:   largest value over foreground cells (0 without foreground)
    unreachable: foreground cells left at the sentinel, i.e. without any
                 background pixel inside the raster
    sentinel:    the "infinite" value of the buffer type, before normalization
    """
    distances: np.ndarray
    max_value: int
    unreachable: np.ndarray
    sentinel: int
    normalized: bool
    cancelled: bool = False

    @property
    def display_range(self) -> Tuple[int, int]:
        return 0, self.max_value


class ScanStats(NamedTuple):
    updated: int
    rows: int
    stopped: bool


def sentinel_for(dtype) -> int:
    """Largest value of an integer buffer type, used as the initial foreground distance."""
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.integer):
        raise ValueError(f"distance buffer needs an integer dtype, got {dtype}")
    # sums are widened to int64 before capping
    if dtype.itemsize > 4:
        raise ValueError(f"distance buffer dtype {dtype} is wider than 32 bits")
    return int(np.iinfo(dtype).max)


def saturating_add(values, weight, ceiling):
    """values + weight as int64, capped at ceiling so the sentinel never wraps around."""
    return np.minimum(np.asarray(values, dtype=np.int64) + int(weight), int(ceiling))


def update_if_needed(row, candidates, foreground):
    """Lower foreground cells of ``row`` where the candidate is strictly smaller.

    This is the only way the scans write into the buffer. Returns the number
    of cells that changed.
    """
    improved = foreground & (candidates < row)
    row[improved] = candidates[improved].astype(row.dtype)
    return int(np.count_nonzero(improved))


def _as_foreground(foreground, shape=None):
    # 0/255 or 0/1 masks: any non-zero cell is foreground
    foreground = np.asarray(foreground).astype(bool, copy=False)
    if foreground.ndim != 2:
        raise ValueError(f"foreground must be 2-D, got shape {foreground.shape}")
    if shape is not None and foreground.shape != tuple(shape):
        raise ValueError(f"foreground shape {foreground.shape} does not match buffer shape {tuple(shape)}")
    return foreground


def init_buffer(foreground, dtype=np.uint16):
    foreground = _as_foreground(foreground)
    buffer = np.zeros(foreground.shape, dtype=dtype)
    buffer[foreground] = sentinel_for(dtype)
    return buffer


def _scan(buffer, foreground, weights, progress, should_stop):
    # Rows in storage order, columns left to right. The backward scan calls
    # this on 180 degree rotated views, so "up" and "left" become "down" and
    # "right" there.
    height, width = buffer.shape
    ortho, diago = weights
    ceiling = sentinel_for(buffer.dtype)
    steps = np.arange(width, dtype=np.int64) * ortho

    updated = 0
    for j in range(height):
        if should_stop is not None and should_stop():
            return ScanStats(updated, j, True)

        row = buffer[j]
        cand = row.astype(np.int64)
        if j > 0:
            up = buffer[j - 1].astype(np.int64)
            cand = np.minimum(cand, saturating_add(up, ortho, ceiling))
            if width > 1:
                # up-left and up-right; the missing one at each border is left at the ceiling
                diag = np.full(width, ceiling, dtype=np.int64)
                diag[1:] = up[:-1]
                diag[:-1] = np.minimum(diag[:-1], up[1:])
                cand = np.minimum(cand, saturating_add(diag, diago, ceiling))

        # left neighbour, d[i] = min(cand[i], d[i-1] + ortho), unrolled into a running minimum
        cand = np.minimum.accumulate(cand - steps) + steps
        updated += update_if_needed(row, cand, foreground[j])

        if progress is not None:
            progress(j + 1, height)
    return ScanStats(updated, height, False)


def forward_scan(buffer, foreground, weights, progress: Optional[ProgressCallback] = None,
                 should_stop: Optional[StopCallback] = None) -> ScanStats:
    """Propagate distances from the up, left, up-left and up-right neighbours, in place."""
    foreground = _as_foreground(foreground, buffer.shape)
    return _scan(buffer, foreground, get_weights(weights), progress, should_stop)


def backward_scan(buffer, foreground, weights, progress: Optional[ProgressCallback] = None,
                  should_stop: Optional[StopCallback] = None) -> ScanStats:
    """Propagate distances from the down, right, down-left and down-right neighbours, in place."""
    foreground = _as_foreground(foreground, buffer.shape)
    return _scan(buffer[::-1, ::-1], foreground[::-1, ::-1], get_weights(weights),
                 progress, should_stop)


def normalize_buffer(buffer, foreground, orthogonal):
    """Integer-divide foreground cells by the orthogonal weight; background stays 0."""
    foreground = _as_foreground(foreground, buffer.shape)
    buffer[foreground] = buffer[foreground] // int(orthogonal)
    return buffer


def foreground_max(buffer, foreground) -> int:
    foreground = _as_foreground(foreground, buffer.shape)
    if not foreground.any():
        return 0
    return int(buffer[foreground].max())


def _reporter(status, verbose):
    def report(message):
        if verbose and message:
            print(f"[INFO] chamfer: {message}")
        if status is not None:
            status(message)
    return report


def distance_map(mask, weights=BORGEFORS, normalize=True, label=DEFAULT_LABEL, dtype=np.uint16,
                 progress: Optional[ProgressCallback] = None,
                 status: Optional[StatusCallback] = None,
                 should_stop: Optional[StopCallback] = None,
                 verbose=False) -> DistanceMap:
    """Chamfer distance from each foreground pixel to the nearest background pixel.

    Args:
        mask: 2-D binary raster; pixels equal to ``label`` are foreground
              (bool masks are used as is)
        weights: (orthogonal, diagonal) step costs or a preset name, see
                 chamfer.weights
        normalize: divide the result by the orthogonal weight (floor)
        label: foreground value, 255 by default
        dtype: integer type of the distance buffer; its max is the sentinel
        progress: called as progress(row, total_rows) after each row of each scan
        status: called with the name of each phase
        should_stop: polled between rows; returning True aborts the scans
        verbose: print phase names
    Return:
        DistanceMap. Foreground without any background in the raster keeps
        the sentinel (divided by the orthogonal weight when normalized) and
        is flagged in ``unreachable``. A cancelled result is not converged.
    """
    weights = get_weights(weights)
    foreground = foreground_mask(mask, label)
    sentinel = sentinel_for(dtype)
    report = _reporter(status, verbose)

    report("Initialization")
    buffer = init_buffer(foreground, dtype)

    cancelled = False
    if buffer.size:
        # the backward scan relies on the forward scan having run over the whole buffer
        report("Forward Scan")
        cancelled = forward_scan(buffer, foreground, weights, progress, should_stop).stopped
        if not cancelled:
            report("Backward Scan")
            cancelled = backward_scan(buffer, foreground, weights, progress, should_stop).stopped

    unreachable = foreground & (buffer == sentinel)

    if normalize:
        report("Normalization")
        normalize_buffer(buffer, foreground, weights.orthogonal)
    report("")

    return DistanceMap(
        distances=buffer,
        max_value=foreground_max(buffer, foreground),
        unreachable=unreachable,
        sentinel=sentinel,
        normalized=bool(normalize),
        cancelled=cancelled,
    )
