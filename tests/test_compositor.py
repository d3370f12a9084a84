import numpy as np
import pytest

from polefield.core.compositor import Compositor, status_label
from polefield.core.field import color_at
from polefield.core.params import ControlParameters
from polefield.core.trajectories import position_for
from polefield.core.types import Mode, Raster, Theme, initial_poles


def positions(c):
    return [(p.x, p.y) for p in c.poles]


class TestSetup:
    def test_initial_poles(self, compositor):
        assert positions(compositor) == [(40, 40), (160, 40), (40, 160), (160, 160)]
        assert [p.color for p in compositor.poles] == [
            (255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]
        assert compositor.mode is Mode.INTERACTIVE

    def test_color_parameters_update_poles(self, compositor):
        compositor.update_parameters({"pole1Color": "#123456", "pole3Color": "garbage"})
        assert compositor.poles[0].color == (0x12, 0x34, 0x56)
        assert compositor.poles[2].color == (255, 255, 255)

    def test_apply_mapping(self, compositor):
        compositor.apply_parameters({"animationEnabled": True})
        assert compositor.mode is Mode.ANIMATED

    @pytest.mark.parametrize("count", [3, 5])
    def test_pole_count_is_fixed(self, raster, count):
        with pytest.raises(ValueError):
            initial_poles(raster, [(0, 0, 0)] * count)


class TestLoops:
    def test_nothing_runs_until_mounted(self, raster, scheduler):
        c = Compositor(raster, ControlParameters(animation_enabled=True), scheduler=scheduler)
        assert scheduler.pending == 0
        c.mount()
        assert c.motion_running
        assert scheduler.pending == 1

    def test_motion_frames_move_poles(self, raster, scheduler):
        c = Compositor(raster, ControlParameters(animation_enabled=True, animation_pattern="figure8"),
                       scheduler=scheduler)
        updates = []
        c.on_update = lambda: updates.append(True)
        c.mount()
        scheduler.fire(1500.0)
        expected = [raster.clamp(*position_for(i, 1500.0, "figure8", 1.0, raster)) for i in range(4)]
        assert positions(c) == expected
        assert updates == [True]
        assert scheduler.pending == 1

    def test_noise_loop_only_touches_noise_time(self, compositor, scheduler):
        compositor.mount()
        compositor.apply_parameters({"noiseEnabled": True})
        assert compositor.noise_running
        assert not compositor.motion_running
        before = positions(compositor)
        scheduler.fire(700.0)
        assert compositor.noise_time == 700.0
        assert positions(compositor) == before

    def test_noise_loop_stops_on_its_own(self, compositor, scheduler):
        compositor.mount()
        compositor.apply_parameters({"noiseEnabled": True})
        scheduler.fire(100.0)
        compositor.apply_parameters({"noiseEnabled": False})
        assert not compositor.noise_running
        assert not compositor.motion_running
        assert scheduler.pending == 0
        assert scheduler.fire(200.0) == 0
        assert compositor.noise_time == 100.0

    def test_animation_takes_over_noise_clock(self, compositor, scheduler):
        compositor.mount()
        compositor.apply_parameters({"noiseEnabled": True})
        compositor.apply_parameters({"noiseEnabled": True, "animationEnabled": True})
        assert compositor.motion_running
        assert not compositor.noise_running
        assert scheduler.pending == 1
        scheduler.fire(300.0)
        assert compositor.noise_time == 300.0

    def test_disabling_animation_stops_loop(self, raster, scheduler):
        c = Compositor(raster, ControlParameters(animation_enabled=True), scheduler=scheduler)
        c.mount()
        c.update_parameters({"animationEnabled": False})
        assert scheduler.pending == 0

    def test_unmount_is_idempotent(self, raster, scheduler):
        c = Compositor(raster, ControlParameters(animation_enabled=True, noise_enabled=True),
                       scheduler=scheduler)
        c.mount()
        c.unmount()
        c.unmount()
        assert scheduler.pending == 0

    def test_clock_never_goes_back(self, raster, scheduler):
        c = Compositor(raster, ControlParameters(animation_enabled=True), scheduler=scheduler)
        c.mount()
        scheduler.fire(1000.0)
        after_first = positions(c)
        scheduler.fire(400.0)
        assert c.clock.now == 1000.0
        assert positions(c) == after_first

    @pytest.mark.parametrize("pattern", ["circular", "figure8", "oscillating", "random", "curl", "bogus"])
    def test_positions_stay_in_bounds(self, pattern, scheduler):
        raster = Raster(60, 40)
        c = Compositor(raster, ControlParameters.from_mapping(
            {"animationEnabled": True, "animationPattern": pattern, "animationSpeed": 3.0}),
            scheduler=scheduler)
        c.mount()
        for t in range(0, 60000, 250):
            scheduler.fire(float(t))
            for x, y in positions(c):
                assert 0 <= x <= 60
                assert 0 <= y <= 40


class TestPointer:
    def test_drag_through_compositor(self, compositor):
        updates = []
        compositor.on_update = lambda: updates.append(True)
        assert compositor.pointer_press(40, 40).changed
        compositor.pointer_move(90, 95)
        compositor.pointer_release()
        assert compositor.poles[0].x == 90
        assert compositor.poles[0].y == 95
        assert len(updates) == 3

    def test_pointer_ignored_while_animated(self, compositor):
        compositor.apply_parameters({"animationEnabled": True})
        before = positions(compositor)
        compositor.pointer_press(40, 40)
        compositor.pointer_move(100, 100)
        compositor.pointer_release()
        assert positions(compositor) == before

    def test_touch_haptic(self, raster):
        haptics = []
        c = Compositor(raster, haptic=haptics.append)
        assert c.pointer_press(160, 40, touch=True).suppress_default
        assert haptics == ["light"]


class TestRender:
    def test_shape_and_opacity(self, small_compositor):
        buf = small_compositor.render()
        assert buf.shape == (32, 48, 4)
        assert buf.dtype == np.uint8
        assert (buf[..., 3] == 255).all()

    def test_idempotent(self, small_compositor):
        small_compositor.apply_parameters({"noiseEnabled": True, "noiseType": "film"})
        small_compositor.advance(1234.0)
        assert small_compositor.render().tobytes() == small_compositor.render().tobytes()

    def test_returns_fresh_arrays(self, small_compositor):
        small_compositor.apply_parameters({"showPoles": False})
        a = small_compositor.render()
        b = small_compositor.render()
        assert a is not b

    def test_field_without_markers(self, compositor):
        compositor.apply_parameters({"showPoles": False})
        buf = compositor.render()
        for x, y in [(0, 0), (100, 100), (13, 170)]:
            expected = color_at(x, y, compositor.poles, 2.0)
            assert np.abs(buf[y, x, :3].astype(int) - np.array(expected)).max() <= 1

    def test_marker_fill_is_pole_color(self, compositor):
        buf = compositor.render()
        assert tuple(buf[45, 40, :3]) == (255, 0, 0)
        assert tuple(buf[45, 160, :3]) == (0, 255, 0)

    def test_theme_changes_markers_only(self, compositor):
        light = compositor.render(Theme.LIGHT)
        dark = compositor.render(Theme.DARK)
        assert not np.array_equal(light, dark)
        compositor.apply_parameters({"showPoles": False})
        assert np.array_equal(compositor.render(Theme.LIGHT), compositor.render("dark"))

    def test_hover_changes_marker(self, compositor):
        plain = compositor.render()
        compositor.pointer_move(40, 40)
        assert not np.array_equal(plain, compositor.render())

    def test_noise_overlay(self, small_compositor):
        small_compositor.apply_parameters({"showPoles": False})
        clean = small_compositor.render()
        small_compositor.apply_parameters({"showPoles": False, "noiseEnabled": True, "noiseIntensity": 0.5})
        noisy = small_compositor.render()
        assert not np.array_equal(clean, noisy)
        small_compositor.advance(9000.0)
        assert not np.array_equal(noisy, small_compositor.render())


class TestStatus:
    def test_plain(self):
        assert status_label(ControlParameters()) == "4-POLE GRADIENT / CANVAS_2D"

    def test_all_flags(self):
        p = ControlParameters.from_mapping({"animationEnabled": True, "noiseEnabled": True, "showPoles": False})
        assert status_label(p) == "4-POLE GRADIENT / CANVAS_2D / ANIMATED / NOISE_OVERLAY / HIDDEN_POLES"

    def test_pattern_status(self, compositor):
        assert compositor.pattern_status() == ""
        compositor.apply_parameters({"animationEnabled": True, "animationPattern": "figure8"})
        assert compositor.pattern_status() == "FIGURE8"
