# chamfer - 3x3 chamfer distance maps of binary rasters
from .weights import (ChamferWeights, InvalidWeightsError, get_weights, PRESETS,
                      CHESSBOARD, CITY_BLOCK, QUASI_EUCLIDEAN, BORGEFORS,
                      WEIGHTS_23, WEIGHTS_57)
from .mask import DEFAULT_LABEL, foreground_mask, threshold_mask
from .distance import (DistanceMap, ScanStats, distance_map, init_buffer,
                       forward_scan, backward_scan, normalize_buffer,
                       foreground_max, saturating_add, update_if_needed,
                       sentinel_for)
from .config import TransformConfig, load_config
from .visualize import colorize_distance_map
