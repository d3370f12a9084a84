import itertools
import math

import numpy as np
import pytest

from polefield.core.noise import NoiseFamily, generate_noise, noise_field
from polefield.core.simplex import SimplexNoise

FAMILIES = list(NoiseFamily)
SAMPLE_X = range(0, 200, 7)
SAMPLE_Y = range(0, 150, 11)
TIMES = [0.0, 16.7, 1234.5, 98765.0]
SCALES = [0.005, 0.02, 0.1]


def _grid(w=40, h=30):
    yy, xx = np.mgrid[0:h, 0:w]
    return xx.astype(np.float64), yy.astype(np.float64)


class TestFamilyCoercion:
    @pytest.mark.parametrize("name", ["analog", "digital", "film", "uniform"])
    def test_known_names(self, name):
        assert NoiseFamily.coerce(name).value == name

    @pytest.mark.parametrize("name", ["vhs", "", None, 3])
    def test_unknown_falls_back_to_uniform(self, name):
        assert NoiseFamily.coerce(name) is NoiseFamily.UNIFORM

    def test_unknown_string_evaluates_as_uniform(self):
        assert generate_noise(12, 34, 0.02, "vhs", 500) == generate_noise(12, 34, 0.02, NoiseFamily.UNIFORM, 500)


class TestScalarNoise:
    @pytest.mark.parametrize("family", FAMILIES)
    def test_deterministic(self, family):
        a = [generate_noise(x, y, 0.02, family, 777.0) for x, y in itertools.product(SAMPLE_X, SAMPLE_Y)]
        b = [generate_noise(x, y, 0.02, family, 777.0) for x, y in itertools.product(SAMPLE_X, SAMPLE_Y)]
        assert a == b

    @pytest.mark.parametrize("family,scale,time", list(itertools.product(FAMILIES, SCALES, TIMES)))
    def test_range(self, family, scale, time):
        for x, y in itertools.product(SAMPLE_X, SAMPLE_Y):
            v = generate_noise(x, y, scale, family, time)
            assert -1.1 <= v <= 1.1, f"{family} {v} at ({x},{y}) scale={scale} t={time}"

    def test_digital_is_bimodal(self):
        values = {generate_noise(x, y, 0.02, NoiseFamily.DIGITAL, 100.0)
                  for x, y in itertools.product(SAMPLE_X, SAMPLE_Y)}
        assert values <= {1.0, -0.3}
        assert len(values) == 2

    def test_digital_quantizes_space(self):
        # scale 0.02 -> one cell per pixel; scale 0.002 -> 10 px cells
        a = generate_noise(0.0, 0.0, 0.002, NoiseFamily.DIGITAL, 0.0)
        b = generate_noise(9.5, 9.5, 0.002, NoiseFamily.DIGITAL, 0.0)
        assert a == b

    def test_analog_varies_with_time(self):
        a = [generate_noise(x, 5, 0.02, NoiseFamily.ANALOG, 0.0) for x in SAMPLE_X]
        b = [generate_noise(x, 5, 0.02, NoiseFamily.ANALOG, 5000.0) for x in SAMPLE_X]
        assert a != b

    def test_uniform_matches_hash(self):
        seed = math.fmod(3 * 12.9898 + 4 * 78.233 + 10 * 0.001, 1.0)
        expected = (math.sin(seed * 43758.5453) * 0.5 + 0.5) * 2 - 1
        assert generate_noise(3, 4, 0.02, NoiseFamily.UNIFORM, 10) == expected


class TestNoiseField:
    @pytest.mark.parametrize("family", FAMILIES)
    def test_matches_scalar(self, family):
        xx, yy = _grid()
        field = noise_field(xx, yy, 0.02, family, 321.0)
        assert field.shape == xx.shape
        scalar = np.array([[generate_noise(x, y, 0.02, family, 321.0) for x in range(40)] for y in range(30)])
        assert np.allclose(field, scalar, atol=1e-9)

    @pytest.mark.parametrize("family", FAMILIES)
    def test_field_range(self, family):
        xx, yy = _grid(120, 90)
        for t in TIMES:
            field = noise_field(xx, yy, 0.05, family, t)
            assert field.min() >= -1.1
            assert field.max() <= 1.1


class TestSimplexNoise:
    def test_zero_at_origin(self):
        s = SimplexNoise()
        assert s.noise3d(0, 0, 0) == 0.0

    def test_permutation_table_doubled(self):
        s = SimplexNoise()
        assert len(s.perm) == 512
        assert s.perm[:256] == s.perm[256:]
        assert sorted(s.perm[:256]) == list(range(256))

    def test_deterministic_across_instances(self):
        a, b = SimplexNoise(), SimplexNoise()
        pts = [(0.3, 1.7, 2.2), (-4.1, 0.5, 9.9), (12.25, -3.5, 0.125)]
        assert [a.noise3d(*p) for p in pts] == [b.noise3d(*p) for p in pts]

    def test_range_and_variation(self):
        s = SimplexNoise()
        vals = [s.noise3d(x * 0.37, y * 0.29, z * 0.41)
                for x, y, z in itertools.product(range(-6, 6), range(-6, 6), range(4))]
        assert all(-1.1 <= v <= 1.1 for v in vals)
        assert max(vals) > 0.2
        assert min(vals) < -0.2

    def test_continuous(self):
        s = SimplexNoise()
        for x in np.linspace(-3, 3, 25):
            assert abs(s.noise3d(x, 0.7, 1.3) - s.noise3d(x + 1e-5, 0.7, 1.3)) < 1e-3

    def test_grid(self):
        s = SimplexNoise()
        g = s.grid(8, 5, 0.1, z=0.5)
        assert g.shape == (5, 8)
        assert g.dtype == np.float32
        assert g[2, 3] == pytest.approx(s.noise3d(0.3, 0.2, 0.5), abs=1e-6)

    def test_grid_matches_scalar(self):
        s = SimplexNoise()
        g = s.grid(23, 17, 0.37, z=-1.3)
        for y in range(17):
            for x in range(23):
                assert g[y, x] == pytest.approx(s.noise3d(x * 0.37, y * 0.37, -1.3), abs=1e-6)
