"""GEV density helpers.

Shape follows the climatological sign convention: ``shape > 0`` gives a heavy
upper tail with a finite lower bound, ``shape < 0`` a finite upper bound at
``location + scale / |shape|``. SciPy's ``genextreme`` uses ``c = -shape``.
"""

from __future__ import annotations

import numpy as np

GUMBEL_TOLERANCE = 1e-12


def gev_logpdf(x, shape, location, scale) -> np.ndarray:
    """Elementwise GEV log-density; ``-inf`` outside the support.

    All arguments broadcast. Scale must be positive; callers gate that first.
    """
    x, shape, location, scale = np.broadcast_arrays(
        np.asarray(x, dtype=float),
        np.asarray(shape, dtype=float),
        np.asarray(location, dtype=float),
        np.asarray(scale, dtype=float),
    )
    z = (x - location) / scale
    out = np.full(z.shape, -np.inf)

    gumbel = np.abs(shape) < GUMBEL_TOLERANCE
    if gumbel.any():
        zg = z[gumbel]
        out[gumbel] = -zg - np.exp(-zg) - np.log(scale[gumbel])

    general = ~gumbel
    if general.any():
        xi = shape[general]
        xz = xi * z[general]
        inside = xz > -1.0
        # log1p: log(1 + xi*z) / xi must stay exact down to the Gumbel cutoff
        logt = np.log1p(xz[inside])
        xi_in = xi[inside]
        values = np.full(xz.shape, -np.inf)
        values[inside] = (
            -(1.0 + 1.0 / xi_in) * logt
            - np.exp(-logt / xi_in)
            - np.log(scale[general][inside])
        )
        out[general] = values
    return out


def gev_pdf(x, shape: float, location: float, scale: float) -> np.ndarray:
    return np.exp(gev_logpdf(x, shape, location, scale))


def gev_upper_bound(shape, location, scale):
    """Upper support endpoint; ``inf`` wherever ``shape >= 0``."""
    shape = np.asarray(shape, dtype=float)
    location = np.asarray(location, dtype=float)
    scale = np.asarray(scale, dtype=float)
    bound = np.full(np.broadcast(shape, location, scale).shape, np.inf)
    negative = np.broadcast_to(shape < 0, bound.shape)
    if negative.any():
        s, m, c = np.broadcast_arrays(shape, location, scale)
        bound[negative] = m[negative] + c[negative] / np.abs(s[negative])
    return bound if bound.ndim else float(bound)


__all__ = ["GUMBEL_TOLERANCE", "gev_logpdf", "gev_pdf", "gev_upper_bound"]
