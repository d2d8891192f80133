import math

import pytest

from halofinder.config import CRITICAL_DENSITY
from halofinder.cosmology import Cosmology
from halofinder.halo_density import find_median_r, threshold_density, vir_density

EDS = Cosmology(h0=0.7, om=1.0, ol=0.0)
LCDM = Cosmology()


def test_vir_density_einstein_de_sitter_is_18_pi_squared():
    assert vir_density(EDS, 1.0) == pytest.approx(18 * math.pi ** 2)
    assert vir_density(EDS, 0.5) == pytest.approx(18 * math.pi ** 2)


def test_vir_density_lcdm_exceeds_eds_today():
    assert vir_density(LCDM, 1.0) > vir_density(EDS, 1.0)


def test_background_definition_scales_with_number():
    pm = 1e9
    t200 = threshold_density("200b", LCDM, 1.0, pm)
    t400 = threshold_density("400b", LCDM, 1.0, pm)
    assert t400 == pytest.approx(2 * t200)
    assert t200 == pytest.approx(200 * LCDM.om * CRITICAL_DENSITY / pm)


def test_leading_m_is_ignored():
    pm = 1e9
    assert threshold_density("M200b", LCDM, 1.0, pm) == pytest.approx(
        threshold_density("200b", LCDM, 1.0, pm)
    )
    assert threshold_density("m500c", LCDM, 0.5, pm) == pytest.approx(
        threshold_density("500c", LCDM, 0.5, pm)
    )


def test_critical_over_background_ratio_today():
    pm = 1e9
    ratio = threshold_density("200c", LCDM, 1.0, pm) / threshold_density(
        "200b", LCDM, 1.0, pm
    )
    assert ratio == pytest.approx(1.0 / LCDM.om, rel=1e-6)


def test_unknown_definition_means_virial():
    pm = 1e9
    vir = threshold_density("vir", LCDM, 0.8, pm)
    assert threshold_density("nonsense", LCDM, 0.8, pm) == pytest.approx(vir)
    assert vir == pytest.approx(
        vir_density(LCDM, 0.8) * LCDM.om * CRITICAL_DENSITY / pm
    )


def test_zero_particle_mass_raises():
    with pytest.raises(ValueError):
        threshold_density("200b", LCDM, 1.0, 0.0)


def test_median_of_three():
    assert find_median_r([5.0, 1.0, 3.0], 0.5) == 3.0


def test_single_value_returned():
    assert find_median_r([2.5], 0.7) == 2.5


def test_frac_zero_gives_minimum():
    data = [4.0, 9.0, 1.5, 7.0]
    assert find_median_r(data, 0.0) == min(data)


def test_rank_invariant():
    data = [float((i * 37) % 101) for i in range(60)]
    value = find_median_r(data, 0.7)
    k = int(len(data) * 0.7)
    assert sum(1 for x in data if x < value) <= k
    assert sum(1 for x in data if x <= value) >= k + 1


def test_empty_raises():
    with pytest.raises(ValueError):
        find_median_r([], 0.5)


def test_frac_out_of_range_raises():
    with pytest.raises(ValueError):
        find_median_r([1.0, 2.0], 1.0)