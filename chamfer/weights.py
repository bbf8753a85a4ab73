from typing import NamedTuple, Sequence, Union

import numpy as np


class InvalidWeightsError(ValueError):
    """Raised when a chamfer weight pair cannot be used for a transform."""


class ChamferWeights(NamedTuple):
    orthogonal: int
    diagonal: int


CHESSBOARD = ChamferWeights(1, 1)
CITY_BLOCK = ChamferWeights(1, 2)
QUASI_EUCLIDEAN = ChamferWeights(10, 14)
BORGEFORS = ChamferWeights(3, 4)
WEIGHTS_23 = ChamferWeights(2, 3)
WEIGHTS_57 = ChamferWeights(5, 7)

PRESETS = {
    "chessboard": CHESSBOARD,
    "city_block": CITY_BLOCK,
    "quasi_euclidean": QUASI_EUCLIDEAN,
    "borgefors": BORGEFORS,
    "weights_23": WEIGHTS_23,
    "weights_57": WEIGHTS_57,
}


def _as_int(value):
    if isinstance(value, (bool, np.bool_)):
        raise InvalidWeightsError(f"weight must be an integer, got {value!r}")
    try:
        as_int = int(value)
    except (TypeError, ValueError):
        raise InvalidWeightsError(f"weight must be an integer, got {value!r}") from None
    if as_int != value:
        raise InvalidWeightsError(f"weight must be integral, got {value!r}")
    return as_int


def get_weights(spec: Union[str, Sequence[int], ChamferWeights]) -> ChamferWeights:
    """Resolve ``spec`` to a validated weight pair.

    Args:
        spec: a preset name ("borgefors", "city-block", ...), a
              ChamferWeights, or any sequence of exactly two integers
              (orthogonal step cost, diagonal step cost).
    Return:
        ChamferWeights with two strictly positive integers.
    Note:
        orthogonal <= diagonal is the usual convention but is not checked.
    """
    if isinstance(spec, str):
        key = spec.strip().lower().replace("-", "_")
        if key not in PRESETS:
            raise InvalidWeightsError(
                f"unknown weight preset {spec!r}; choose one of {sorted(PRESETS)}")
        return PRESETS[key]

    try:
        values = list(spec)
    except TypeError:
        raise InvalidWeightsError(f"weights must be a pair of integers, got {spec!r}") from None
    if len(values) != 2:
        raise InvalidWeightsError(f"expected exactly 2 weights, got {len(values)}")

    ortho, diago = (_as_int(v) for v in values)
    if ortho <= 0 or diago <= 0:
        raise InvalidWeightsError(f"weights must be strictly positive, got ({ortho}, {diago})")
    return ChamferWeights(ortho, diago)
