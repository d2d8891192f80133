"""Hubble expansion and cosmological distances."""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cached_property

_MAX_Z = 300
_Z_BINS = 1000
_TOTAL_BINS = _MAX_Z * _Z_BINS
_SPEED_OF_LIGHT_OVER_H100 = 2997.92458  # Mpc


def redshift(a: float) -> float:
    """Redshift for a scale factor."""
    return 1.0 / a - 1.0


def scale_factor(z: float) -> float:
    """Scale factor for a redshift."""
    return 1.0 / (1.0 + z)


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


@dataclass(frozen=True)
class Cosmology:
    """A w0-wa cosmology with tabulated comoving distances up to z = 300."""

    h0: float = 0.7
    om: float = 0.27
    ol: float = 0.73
    w0: float = -1.0
    wa: float = 0.0

    @property
    def dh(self) -> float:
        """Hubble distance in Mpc."""
        return _SPEED_OF_LIGHT_OVER_H100 / self.h0

    def _weff(self, a: float) -> float:
        if a != 1.0:
            return self.w0 + self.wa - self.wa * (a - 1.0) / math.log(a)
        return self.w0

    def hubble_scaling(self, z: float) -> float:
        """H(z)/H0."""
        z1 = 1.0 + z
        a = 1.0 / z1
        return math.sqrt(
            self.om * z1 ** 3 + self.ol * a ** (-3.0 * (1.0 + self._weff(a)))
        )

    @cached_property
    def _dc(self) -> list:
        table = []
        integral = 0.0
        dh = self.dh
        for i in range(_TOTAL_BINS):
            z = (i + 0.5) / _Z_BINS
            table.append(integral * dh)
            integral += 1.0 / (self.hubble_scaling(z) * _Z_BINS)
        return table

    def comoving_distance(self, z: float) -> float:
        """Line-of-sight comoving distance in Mpc."""
        if z < 0:
            return 0.0
        f = z * _Z_BINS
        table = self._dc
        if f > _TOTAL_BINS - 1:
            return table[-1]
        bin_index = int(f)
        if bin_index > _TOTAL_BINS - 2:
            return table[-1]
        f -= bin_index
        return table[bin_index] * (1.0 - f) + table[bin_index + 1] * f

    def comoving_distance_h(self, z: float) -> float:
        """Comoving distance in Mpc/h."""
        return self.comoving_distance(z) * self.h0

    def transverse_distance(self, z: float) -> float:
        """Transverse comoving distance (flat universe)."""
        return self.comoving_distance(z)

    def angular_diameter_distance(self, z: float) -> float:
        return self.transverse_distance(z) / (1.0 + z)

    def luminosity_distance(self, z: float) -> float:
        return (1.0 + z) * self.transverse_distance(z)

    def comoving_volume_element(self, z: float) -> float:
        """dVc/dz per steradian."""
        z1da = (1.0 + z) * self.angular_diameter_distance(z)
        return self.dh * (z1da * z1da) / self.hubble_scaling(z)

    def comoving_volume(self, z: float) -> float:
        r = self.transverse_distance(z)
        return 4.0 * math.pi * r * r * r / 3.0

    def comoving_distance_to_redshift(self, r: float) -> float:
        """Invert the comoving distance (Mpc) by secant iteration."""
        if r <= 0:
            return 0.0
        z = 1.0
        dz = 0.1
        while dz > 1e-7:
            rt = self.transverse_distance(z)
            denominator = self.transverse_distance(z + dz) - rt
            if denominator == 0:
                return z
            dz = ((r - rt) * dz) / denominator
            if not math.isfinite(dz):
                return z
            if z + dz < 0:
                z /= 3.0
            else:
                z += dz
            dz = min(abs(dz), 0.1)
        return z

    def comoving_volume_to_redshift(self, vc: float) -> float:
        r = _cbrt(vc * (3.0 / (4.0 * math.pi)))
        return self.comoving_distance_to_redshift(r)

    def comoving_distance_h_to_redshift(self, r: float) -> float:
        return self.comoving_distance_to_redshift(r / self.h0)