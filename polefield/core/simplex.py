"""3D simplex noise on a fixed permutation table.

Standalone primitive; the field overlay does not depend on it.
"""

from __future__ import annotations

import math

import numpy as np

_GRAD3 = (
    (1, 1, 0), (-1, 1, 0), (1, -1, 0), (-1, -1, 0),
    (1, 0, 1), (-1, 0, 1), (1, 0, -1), (-1, 0, -1),
    (0, 1, 1), (0, -1, 1), (0, 1, -1), (0, -1, -1),
)

_P = (
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225, 140, 36, 103, 30, 69, 142, 8, 99, 37, 240,
    21, 10, 23, 190, 6, 148, 247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32, 57, 177, 33, 88,
    237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175, 74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83,
    111, 229, 122, 60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54, 65, 25, 63, 161, 1, 216, 80,
    73, 209, 76, 132, 187, 208, 89, 18, 169, 200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
    52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212, 207, 206, 59, 227, 47, 16, 58, 17, 182,
    189, 28, 42, 223, 183, 170, 213, 119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9, 129, 22,
    39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104, 218, 246, 97, 228, 251, 34, 242, 193, 238, 210,
    144, 12, 191, 179, 162, 241, 81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157, 184, 84,
    204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93, 222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78,
    66, 215, 61, 156, 180,
)

F3 = 1.0 / 3.0
G3 = 1.0 / 6.0

_GRAD3_ARRAY = np.array(_GRAD3, dtype=np.float64)


def _corner(gi: int, x: float, y: float, z: float) -> float:
    t = 0.6 - x * x - y * y - z * z
    if t < 0:
        return 0.0
    t *= t
    g = _GRAD3[gi]
    return t * t * (g[0] * x + g[1] * y + g[2] * z)


def _corner_field(gi: np.ndarray, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
    g = _GRAD3_ARRAY[gi]
    t = 0.6 - x * x - y * y - z * z
    t = np.where(t < 0, 0.0, t)
    t *= t
    return t * t * (g[..., 0] * x + g[..., 1] * y + g[..., 2] * z)


class SimplexNoise:
    """Classic skewed-cell 3D simplex noise. Output is roughly in [-1, 1]."""

    def __init__(self):
        self.perm = [_P[i & 255] for i in range(512)]

    def noise3d(self, xin: float, yin: float, zin: float) -> float:
        perm = self.perm

        s = (xin + yin + zin) * F3
        i = math.floor(xin + s)
        j = math.floor(yin + s)
        k = math.floor(zin + s)

        t = (i + j + k) * G3
        x0 = xin - (i - t)
        y0 = yin - (j - t)
        z0 = zin - (k - t)

        # simplex corner ordering
        if x0 >= y0:
            if y0 >= z0:
                i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 1, 0
            elif x0 >= z0:
                i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 0, 1
            else:
                i1, j1, k1, i2, j2, k2 = 0, 0, 1, 1, 0, 1
        else:
            if y0 < z0:
                i1, j1, k1, i2, j2, k2 = 0, 0, 1, 0, 1, 1
            elif x0 < z0:
                i1, j1, k1, i2, j2, k2 = 0, 1, 0, 0, 1, 1
            else:
                i1, j1, k1, i2, j2, k2 = 0, 1, 0, 1, 1, 0

        x1, y1, z1 = x0 - i1 + G3, y0 - j1 + G3, z0 - k1 + G3
        x2, y2, z2 = x0 - i2 + 2.0 * G3, y0 - j2 + 2.0 * G3, z0 - k2 + 2.0 * G3
        x3, y3, z3 = x0 - 1.0 + 3.0 * G3, y0 - 1.0 + 3.0 * G3, z0 - 1.0 + 3.0 * G3

        ii = i & 255
        jj = j & 255
        kk = k & 255

        gi0 = perm[ii + perm[jj + perm[kk]]] % 12
        gi1 = perm[ii + i1 + perm[jj + j1 + perm[kk + k1]]] % 12
        gi2 = perm[ii + i2 + perm[jj + j2 + perm[kk + k2]]] % 12
        gi3 = perm[ii + 1 + perm[jj + 1 + perm[kk + 1]]] % 12

        n = (
            _corner(gi0, x0, y0, z0)
            + _corner(gi1, x1, y1, z1)
            + _corner(gi2, x2, y2, z2)
            + _corner(gi3, x3, y3, z3)
        )
        return 32.0 * n

    def grid(self, width: int, height: int, scale: float, z: float = 0.0) -> np.ndarray:
        """Sample a (height, width) float32 plane at ``(x*scale, y*scale, z)``.

        Same arithmetic as ``noise3d``, evaluated over the whole plane at once.
        """
        perm = np.asarray(self.perm, dtype=np.int64)
        ys, xs = np.mgrid[0:height, 0:width]
        xin = xs * scale
        yin = ys * scale
        zin = np.full(xin.shape, float(z))

        s = (xin + yin + zin) * F3
        i = np.floor(xin + s)
        j = np.floor(yin + s)
        k = np.floor(zin + s)
        t = (i + j + k) * G3
        x0 = xin - (i - t)
        y0 = yin - (j - t)
        z0 = zin - (k - t)

        xy = x0 >= y0
        yz = y0 >= z0
        xz = x0 >= z0
        i1 = (xy & (yz | xz)).astype(np.int64)
        j1 = (~xy & yz).astype(np.int64)
        k1 = 1 - i1 - j1
        i2 = (xy | (yz & xz)).astype(np.int64)
        j2 = (~xy | yz).astype(np.int64)
        k2 = 2 - i2 - j2

        x1, y1, z1 = x0 - i1 + G3, y0 - j1 + G3, z0 - k1 + G3
        x2, y2, z2 = x0 - i2 + 2.0 * G3, y0 - j2 + 2.0 * G3, z0 - k2 + 2.0 * G3
        x3, y3, z3 = x0 - 1.0 + 3.0 * G3, y0 - 1.0 + 3.0 * G3, z0 - 1.0 + 3.0 * G3

        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        kk = k.astype(np.int64) & 255

        gi0 = perm[ii + perm[jj + perm[kk]]] % 12
        gi1 = perm[ii + i1 + perm[jj + j1 + perm[kk + k1]]] % 12
        gi2 = perm[ii + i2 + perm[jj + j2 + perm[kk + k2]]] % 12
        gi3 = perm[ii + 1 + perm[jj + 1 + perm[kk + 1]]] % 12

        n = (
            _corner_field(gi0, x0, y0, z0)
            + _corner_field(gi1, x1, y1, z1)
            + _corner_field(gi2, x2, y2, z2)
            + _corner_field(gi3, x3, y3, z3)
        )
        return (32.0 * n).astype(np.float32)
