"""Ocean surface synthesised with an FFT from a Phillips spectrum.

The model follows Tessendorf's "Simulating Ocean Water". Grid values are
stored flat, with grid point ``(n, m)`` at index ``m * N + n``.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

__all__ = ["GRAVITY", "SUPPRESSION_LENGTH", "Wave"]

GRAVITY = 9.81
SUPPRESSION_LENGTH = 0.1


class Wave:
    """A wave height field over an ``n`` by ``m`` grid.

    ``length_x`` and ``length_z`` are the real extents of the grid, ``wind``
    the wind direction, ``wind_speed`` its speed, ``amplitude`` the spectrum
    scale and ``choppiness`` the weight of horizontal displacement.
    """

    def __init__(
        self,
        n: int,
        m: int,
        length_x: float,
        length_z: float,
        wind: Sequence[float],
        wind_speed: float,
        amplitude: float,
        choppiness: float = 1.0,
        seed: int | None = None,
    ) -> None:
        if n <= 0 or m <= 0:
            raise ValueError("grid resolution must be positive")
        wind_vec = np.asarray(wind, dtype=np.float64)
        wind_norm = float(np.linalg.norm(wind_vec))
        if wind_norm == 0.0:
            raise ValueError("wind direction must not be zero")

        self.n = n
        self.m = m
        self.length_x = float(length_x)
        self.length_z = float(length_z)
        self.wind_direction = wind_vec / wind_norm
        self.wind_speed = float(wind_speed)
        self.amplitude = float(amplitude)
        self.choppiness = float(choppiness)

        self._rng = np.random.default_rng(seed)
        self._k = self.wave_vectors()
        self._k_length = np.linalg.norm(self._k, axis=1)
        self._omega = np.sqrt(GRAVITY * self._k_length)

        spectrum_root = np.sqrt(self.phillips_spectrum(self._k))
        self._h0 = self._gaussian_pairs() * spectrum_root
        self._h0_conj = np.conj(self._gaussian_pairs() * spectrum_root)

        self.height_field = np.zeros((n * m, 3))
        self.normal_field = np.zeros((n * m, 3))

    def _gaussian_pairs(self) -> np.ndarray:
        size = self.n * self.m
        real = self._rng.standard_normal(size)
        imag = self._rng.standard_normal(size)
        return math.sqrt(0.5) * (real + 1j * imag)

    def _grid(self) -> tuple[np.ndarray, np.ndarray]:
        """Return the n and m coordinate of every flat index."""
        m_idx, n_idx = np.meshgrid(np.arange(self.m), np.arange(self.n), indexing="ij")
        return n_idx.reshape(-1), m_idx.reshape(-1)

    def wave_vectors(self) -> np.ndarray:
        """Return the wave vector of every grid point, shape (n * m, 2)."""
        n_idx, m_idx = self._grid()
        kx = 2.0 * math.pi * (n_idx - self.n // 2) / self.length_x
        kz = 2.0 * math.pi * (m_idx - self.m // 2) / self.length_z
        return np.stack([kx, kz], axis=1)

    def phillips_spectrum(self, k: Sequence[float] | np.ndarray) -> np.ndarray | float:
        """Evaluate the Phillips spectrum for one or more wave vectors."""
        vectors = np.asarray(k, dtype=np.float64)
        single = vectors.ndim == 1
        vectors = vectors.reshape(-1, 2)

        largest = self.wind_speed * self.wind_speed / GRAVITY
        length = np.linalg.norm(vectors, axis=1)
        result = np.zeros(len(vectors))
        nonzero = length > 0
        if np.any(nonzero):
            kl = length[nonzero]
            k_hat = vectors[nonzero] / kl[:, None]
            alignment = k_hat @ self.wind_direction
            with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
                values = (
                    self.amplitude
                    * np.exp(-1.0 / (kl * largest * kl * largest))
                    / kl**4
                    * alignment**2
                )
                values *= np.exp(-kl * kl * SUPPRESSION_LENGTH * SUPPRESSION_LENGTH)
            result[nonzero] = np.nan_to_num(values, nan=0.0)
        return float(result[0]) if single else result

    def h_twiddle(self, time: float) -> np.ndarray:
        """Return the complex spectrum amplitudes at the given time."""
        phase = np.exp(1j * self._omega * time)
        return self._h0 * phase + self._h0_conj * np.conj(phase)

    def _inverse_fft(self, values: np.ndarray) -> np.ndarray:
        # Unnormalised backward transform over an (n, m) view of the flat data.
        grid = values.reshape(self.n, self.m)
        return (np.fft.ifft2(grid) * (self.n * self.m)).reshape(-1)

    def build_field(self, time: float) -> tuple[np.ndarray, np.ndarray]:
        """Compute the displaced positions and normals at the given time.

        The results are stored in ``height_field`` and ``normal_field`` (each
        of shape (n * m, 3)) and also returned.
        """
        h = self.h_twiddle(time)
        k = self._k
        safe_length = np.where(self._k_length == 0, 1.0, self._k_length)
        k_unit = k / safe_length[:, None]

        height = self._inverse_fft(h).real
        slope_x = self._inverse_fft(1j * k[:, 0] * h).real
        slope_z = self._inverse_fft(1j * k[:, 1] * h).real
        disp_x = self._inverse_fft(-1j * k_unit[:, 0] * h).real
        disp_z = self._inverse_fft(-1j * k_unit[:, 1] * h).real

        n_idx, m_idx = self._grid()
        sign = np.where((n_idx + m_idx) % 2 == 1, -1.0, 1.0)

        normals = np.stack([sign * slope_x, -np.ones_like(slope_x), sign * slope_z], axis=1)
        normals /= np.linalg.norm(normals, axis=1)[:, None]

        positions = np.stack(
            [
                (n_idx - self.n // 2) * self.length_x / self.n
                - sign * self.choppiness * disp_x,
                sign * height,
                (m_idx - self.m // 2) * self.length_z / self.m
                - sign * self.choppiness * disp_z,
            ],
            axis=1,
        )

        self.height_field = positions
        self.normal_field = normals
        return positions, normals