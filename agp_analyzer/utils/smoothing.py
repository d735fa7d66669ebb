"""
Smoothing utilities for time-of-day percentile bands.

Savitzky-Golay smoothing of percentile curves, applied after the windowed
percentile pass when a smoother profile is wanted for display.
"""

import numpy as np
import pandas as pd
from scipy.signal import savgol_filter


def savgol_smooth(
    series: pd.Series,
    window: int = 15,
    polyorder: int = 2
) -> pd.Series:
    """Apply Savitzky-Golay filter to the non-missing points of a series.

    The Savitzky-Golay filter fits a polynomial to each window of data,
    which preserves peaks better than a simple moving average.

    Args:
        series: Input values; NaN marks missing points, which stay NaN.
        window: Window length (made odd and larger than polyorder).
        polyorder: Order of polynomial to fit.

    Returns:
        Smoothed series with same index.
    """
    if window % 2 == 0:
        window += 1

    if window <= polyorder:
        window = polyorder + 2 if (polyorder + 2) % 2 == 1 else polyorder + 3

    valid_mask = series.notna()
    valid_series = series[valid_mask]

    # Shrink the window to fit short series
    if len(valid_series) < window:
        window = len(valid_series) if len(valid_series) % 2 == 1 else len(valid_series) - 1
        if window <= polyorder:
            return series

    smoothed_values = savgol_filter(valid_series.to_numpy(dtype=float), window, polyorder)
    result = series.astype(float).copy()
    result[valid_mask] = smoothed_values
    return result


def smooth_percentile_frame(
    frame: pd.DataFrame,
    window: int,
    polyorder: int = 2
) -> pd.DataFrame:
    """Smooth every percentile column of a bucket-by-percentile frame.

    Rows that are entirely NaN (empty buckets) are left untouched. Smoothed
    columns are re-sorted row-wise so that the percentiles stay ordered.

    Args:
        frame: One row per bucket, one column per percentile.
        window: Savitzky-Golay window length in buckets.
        polyorder: Polynomial order.

    Returns:
        Smoothed frame with the same shape.
    """
    smoothed = frame.copy()
    for col in smoothed.columns:
        smoothed[col] = savgol_smooth(smoothed[col], window, polyorder)

    values = smoothed.to_numpy(dtype=float)
    empty = np.isnan(values).all(axis=1)
    values[~empty] = np.sort(values[~empty], axis=1)
    return pd.DataFrame(values, index=frame.index, columns=frame.columns)
