from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
import yaml

from .distance import sentinel_for
from .mask import DEFAULT_LABEL
from .weights import ChamferWeights, get_weights


@dataclass
class TransformConfig:
    weights: Union[str, Sequence[int]] = "borgefors"
    normalize: bool = True
    label: int = DEFAULT_LABEL
    dtype: str = "uint16"
    threshold: Optional[float] = None

    def weight_pair(self) -> ChamferWeights:
        return get_weights(self.weights)

    def numpy_dtype(self) -> np.dtype:
        dtype = np.dtype(self.dtype)
        sentinel_for(dtype)
        return dtype


def config_from_dict(data: Optional[Dict[str, Any]]) -> TransformConfig:
    data = dict(data or {})
    known = {f.name for f in fields(TransformConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown config keys: {unknown}; expected some of {sorted(known)}")
    cfg = TransformConfig(**data)
    # fail on bad weights/dtype when loading rather than mid-run
    cfg.weight_pair()
    cfg.numpy_dtype()
    return cfg


def load_config(path: Union[str, Path]) -> TransformConfig:
    """Read a YAML transform config, e.g.

        weights: borgefors      # or [3, 4]
        normalize: true
        label: 255
        dtype: uint16
        threshold: 127          # optional, binarize non-binary inputs
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    return config_from_dict(data)
