"""Tests for source and mask field builders."""

import numpy as np
import pytest

from halftonelab import BlendMode, NoiseType, Params, SourceMode
from halftonelab.fields import (
    MASK_SEED_OFFSET, gradient_field, mask_field, noise_field, smoothstep_band, source_field,
)
from halftonelab.noise import SimplexNoise
from halftonelab.params import GradientParams, MaskParams, NoiseParams

W, H = 48, 32


class TestNoiseField:

    def test_shape_dtype_range(self):
        f = noise_field(W, H, NoiseParams())
        assert f.shape == (H, W)
        assert f.dtype == np.float32
        assert f.min() >= 0 and f.max() <= 255

    def test_deterministic(self):
        assert np.array_equal(noise_field(W, H, NoiseParams(seed=3)), noise_field(W, H, NoiseParams(seed=3)))

    def test_seed_matters(self):
        assert not np.array_equal(noise_field(W, H, NoiseParams(seed=3)), noise_field(W, H, NoiseParams(seed=4)))

    def test_zero_contrast_is_mid_gray(self):
        f = noise_field(W, H, NoiseParams(contrast=0.0))
        assert np.all(f == 127.5)

    @pytest.mark.parametrize("brightness, expected", [(255, 255.0), (-255, 0.0)])
    def test_brightness_saturates(self, brightness, expected):
        f = noise_field(W, H, NoiseParams(contrast=0.0, brightness=brightness))
        assert np.all(f == expected)

    @pytest.mark.parametrize("kind", [NoiseType.RIDGED, NoiseType.WARP])
    def test_variants_differ_from_plain(self, kind):
        plain = noise_field(W, H, NoiseParams(seed=8))
        other = noise_field(W, H, NoiseParams(seed=8, noise_type=kind))
        assert not np.array_equal(plain, other)

    def test_zero_warp_amount_matches_plain(self):
        plain = noise_field(W, H, NoiseParams(seed=8))
        warped = noise_field(W, H, NoiseParams(seed=8, noise_type=NoiseType.WARP, warp_amount=0.0))
        assert np.array_equal(plain, warped)

    def test_single_octave_is_rescaled_noise(self):
        p = NoiseParams(seed=21, octaves=1, scale=2.0)
        f = noise_field(W, H, p)
        n = SimplexNoise(21).noise2d(5 / H * 2.0, 7 / H * 2.0)
        assert f[7, 5] == pytest.approx((n + 1) * 0.5 * 255, abs=1e-3)


class TestGradientField:

    def test_left_to_right_non_increasing(self):
        f = gradient_field(W, H, GradientParams(direction=0, start=0, end=100, curve=1))
        assert np.all(np.diff(f, axis=1) <= 0)
        assert np.all(f[:, 0] == 255)

    def test_rows_constant_for_horizontal_direction(self):
        f = gradient_field(W, H, GradientParams(direction=0))
        assert np.all(f == f[0:1, :])

    def test_top_to_bottom(self):
        f = gradient_field(W, H, GradientParams(direction=90))
        assert np.all(np.diff(f, axis=0) <= 1e-3)
        assert f[0, 0] == 255

    def test_reversed_window(self):
        f = gradient_field(W, H, GradientParams(direction=0, start=100, end=0))
        assert np.all(np.diff(f, axis=1) >= 0)
        assert np.all(f[:, 0] == 0)

    def test_degenerate_window_is_mid_gray(self):
        f = gradient_field(W, H, GradientParams(start=40, end=40))
        assert np.all(f == 127.5)

    def test_window_edges(self):
        f = gradient_field(100, 10, GradientParams(direction=0, start=20, end=60))
        assert np.all(f[:, :21] == 255)
        assert np.all(f[:, 60:] == 0)

    def test_curve_sharpens(self):
        linear = gradient_field(W, H, GradientParams(curve=1))
        curved = gradient_field(W, H, GradientParams(curve=3))
        assert np.all(curved <= linear + 1e-3)
        assert curved.sum() < linear.sum()

    def test_diagonal_spans_canvas(self):
        f = gradient_field(W, H, GradientParams(direction=45))
        assert f[0, 0] == 255
        assert f[-1, -1] < 20


class TestSourceField:

    def test_modes(self):
        p = Params()
        assert np.array_equal(source_field(W, H, p), noise_field(W, H, p.noise))
        g = Params(source_mode=SourceMode.GRADIENT)
        assert np.array_equal(source_field(W, H, g), gradient_field(W, H, g.gradient))

    def test_multiply_blend(self):
        p = Params(source_mode=SourceMode.BOTH).replace(blend={"mode": BlendMode.MULTIPLY})
        n = noise_field(W, H, p.noise) / 255
        g = gradient_field(W, H, p.gradient) / 255
        assert np.allclose(source_field(W, H, p), n * g * 255, atol=1e-3)

    def test_mix_zero_is_noise(self):
        p = Params(source_mode=SourceMode.BOTH).replace(blend={"mode": BlendMode.MIX, "mix": 0.0})
        assert np.allclose(source_field(W, H, p), noise_field(W, H, p.noise), atol=1e-3)

    def test_mix_one_is_gradient(self):
        p = Params(source_mode=SourceMode.BOTH).replace(blend={"mode": BlendMode.MIX, "mix": 1.0})
        assert np.allclose(source_field(W, H, p), gradient_field(W, H, p.gradient), atol=1e-3)

    def test_add_blend_never_darker_than_mix(self):
        base = Params(source_mode=SourceMode.BOTH)
        add = source_field(W, H, base.replace(blend={"mode": BlendMode.ADD}))
        mix = source_field(W, H, base.replace(blend={"mode": BlendMode.MIX}))
        assert np.all(add >= mix - 1e-3)
        assert add.max() <= 255


class TestMaskField:

    def mask(self, **kw):
        return Params().replace(mask=dict({"enabled": True}, **kw))

    def test_bounded(self):
        m = mask_field(W, H, self.mask())
        assert m.dtype == np.float32
        assert m.min() >= 0 and m.max() <= 1

    def test_uses_offset_seed(self):
        assert not np.array_equal(SimplexNoise(500).perm, SimplexNoise(500 + MASK_SEED_OFFSET).perm)

    def test_not_identical_to_source(self):
        p = self.mask(threshold=0.0, softness=0.0, vertical_bias=0.0, edge_fade=0.0, scale=3.0)
        p = p.replace(noise={"octaves": 1})
        assert not np.array_equal(mask_field(W, H, p), source_field(W, H, p) / 255)

    def test_edge_fade_zero_disables_edge_term(self):
        m = mask_field(W, H, self.mask(threshold=0.0, softness=0.0, vertical_bias=0.0, edge_fade=0.0))
        assert np.all(m == 1.0)

    def test_edge_fade_kills_border(self):
        m = mask_field(W, H, self.mask(threshold=0.0, softness=0.0, vertical_bias=0.0, edge_fade=0.3))
        assert np.all(m[:, 0] == 0)
        assert np.all(m[0, :] == 0)

    def test_full_vertical_bias_fades_top(self):
        m = mask_field(W, H, self.mask(threshold=0.0, softness=0.0, vertical_bias=1.0, edge_fade=0.0))
        assert np.all(m[0, :] == 0)
        assert np.all(m[-1, :] == 1)

    def test_deterministic(self):
        assert np.array_equal(mask_field(W, H, self.mask()), mask_field(W, H, self.mask()))

    def test_smoothstep_band(self):
        v = np.array([0.0, 0.3, 0.45, 0.6, 1.0])
        out = smoothstep_band(v, 0.45, 0.1)
        assert out[0] == 0 and out[1] == 0
        assert out[2] == pytest.approx(0.5)
        assert out[3] == 1 and out[4] == 1

    def test_mask_params_default_disabled(self):
        assert MaskParams().enabled is False
