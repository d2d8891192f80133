"""Spherical-overdensity thresholds and median selection used in halo finding."""

from __future__ import annotations

import math
import re
from typing import Sequence

from .config import CRITICAL_DENSITY
from .cosmology import Cosmology

_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _leading_float(text: str) -> float:
    """Parse the numeric prefix of ``text``; 0.0 when there is none."""
    match = _LEADING_NUMBER.match(text)
    return float(match.group()) if match else 0.0


def _matter_fraction(cosmology: Cosmology, a: float) -> float:
    return (cosmology.om / a ** 3) / cosmology.hubble_scaling(1.0 / a - 1.0) ** 2


def vir_density(cosmology: Cosmology, a: float) -> float:
    """Virial overdensity relative to the background (Bryan & Norman fit)."""
    x = _matter_fraction(cosmology, a) - 1.0
    return (18 * math.pi * math.pi + 82.0 * x - 39 * x * x) / (1.0 + x)


def threshold_density(
    definition: str, cosmology: Cosmology, scale: float, particle_mass: float
) -> float:
    """Threshold density, in particles per (Mpc/h)^3, for a mass definition.

    Definitions ending in ``b`` are relative to the background matter
    density, those ending in ``c`` to the critical density; a leading ``m``
    is ignored. Anything else means the virial definition.
    """
    if not particle_mass:
        raise ValueError("particle_mass must be non-zero")
    background = cosmology.om * CRITICAL_DENSITY / particle_mass
    body = definition[1:] if definition[:1] in ("m", "M") else definition
    last = definition[-1:].lower()
    if last == "b":
        return _leading_float(body) * background
    if last == "c":
        return _leading_float(body) * background / _matter_fraction(cosmology, scale)
    return vir_density(cosmology, scale) * background


def find_median_r(radii: Sequence[float], frac: float) -> float:
    """Value at rank ``int(len(radii) * frac)`` of the sorted radii."""
    n = len(radii)
    if n == 0:
        raise ValueError("radii must not be empty")
    if n == 1:
        return radii[0]
    k = int(n * frac)
    if not 0 <= k < n:
        raise ValueError("frac must select a rank inside the list")
    return sorted(radii)[k]