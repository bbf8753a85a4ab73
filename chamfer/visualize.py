import cv2
import numpy as np


def to_uint8(result):
    """Rescale a DistanceMap onto 0..255 using its display range."""
    lo, hi = result.display_range
    d = result.distances.astype(np.float32)
    if hi - lo < 1e-8:
        return np.zeros(d.shape, np.uint8)
    s = np.clip((d - lo) / (hi - lo), 0, 1)
    return (s * 255).astype(np.uint8)


def colorize_distance_map(result, colormap=cv2.COLORMAP_JET):
    """BGR preview of a distance map; background (distance 0) is painted black."""
    cm = cv2.applyColorMap(to_uint8(result), colormap)
    cm[result.distances == 0] = 0
    return cm
