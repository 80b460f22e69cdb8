from __future__ import annotations

import numpy as np
import pandas as pd

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lng: float, lat: float, lngs: np.ndarray, lats: np.ndarray) -> np.ndarray:
    """Great-circle distance in metres from one origin to many points."""
    lng1, lat1 = np.radians(lng), np.radians(lat)
    lng2, lat2 = np.radians(lngs), np.radians(lats)
    a = (
        np.sin((lat2 - lat1) / 2.0) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin((lng2 - lng1) / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def split_coordinates(coords: pd.Series) -> tuple[np.ndarray, np.ndarray]:
    """Split a ``[lng, lat]`` column into two float arrays (NaN when unusable)."""

    def _part(value, i):
        if isinstance(value, (list, tuple)) and len(value) == 2:
            try:
                return float(value[i])
            except (TypeError, ValueError):
                return np.nan
        return np.nan

    lngs = coords.map(lambda v: _part(v, 0)).to_numpy(dtype=float)
    lats = coords.map(lambda v: _part(v, 1)).to_numpy(dtype=float)
    return lngs, lats
