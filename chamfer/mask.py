import cv2
import numpy as np

DEFAULT_LABEL = 255


def foreground_mask(image, label=DEFAULT_LABEL):
    """Boolean foreground mask of a binary raster.

    Input:
        image: 2-D array (uint8 0/255 mask, label image, or bool), or a
               3-channel BGR image which is converted to grayscale first
        label: pixel value treated as foreground; any other value is background
    Return:
        bool array of the same height/width, True on foreground.
    Note:
        bool input is taken as is, label is ignored for it.
    """
    image = np.asarray(image)
    if image.ndim == 3 and image.shape[2] == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if image.ndim != 2:
        raise ValueError(f"mask must be 2-D, got shape {image.shape}")
    if image.dtype == bool:
        return image.copy()
    return image == label


def threshold_mask(image, thresh, invert=False):
    """Binarize a grayscale image into a 0/255 uint8 mask (pixels > thresh -> 255)."""
    if image.ndim == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    mode = cv2.THRESH_BINARY_INV if invert else cv2.THRESH_BINARY
    _, binary = cv2.threshold(image.astype(np.float32), float(thresh), 255, mode)
    return binary.astype(np.uint8)
