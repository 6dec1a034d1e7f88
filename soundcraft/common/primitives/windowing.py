"""
Windowing Primitives - Hann weighting applied before every transform.

Pure numpy/scipy, no state.
"""

import numpy as np
import scipy.signal


def hann_window(n: int) -> np.ndarray:
    """
    Symmetric Hann window.

    w[i] = 0.5 * (1 - cos(2*pi*i / (N - 1)))

    N == 1 gives [1.0] (scipy defines the degenerate window that way,
    so there is no division by N - 1 == 0). N == 0 gives an empty array.

    Args:
        n: Window length

    Returns:
        Window as contiguous float32 array
    """
    if n <= 0:
        return np.zeros(0, dtype=np.float32)
    return np.ascontiguousarray(scipy.signal.windows.hann(n, sym=True), dtype=np.float32)


def apply_window(y: np.ndarray) -> np.ndarray:
    """
    Multiply a sample block by a Hann window of the same length.

    Args:
        y: Sample block

    Returns:
        New windowed array, same length as y
    """
    y = np.ascontiguousarray(y, dtype=np.float32)
    return y * hann_window(len(y))
