"""Tests for the demo entry point and the synthetic sources."""

import sys

import numpy as np
import pytest

from telemetry_table.__main__ import build_demo, main, push_live, run_headless
from telemetry_table.core.types import TableSettings, TimeBounds
from telemetry_table.sources.synthetic import UTC_KEY, SineGenerator, make_objects, synthetic_metadata

NOW_MS = 1_700_000_000_000.0


class TestSynthetic:
    def test_history_is_evenly_spaced_and_inclusive(self):
        gen = SineGenerator(make_objects(1)[0])
        history = gen.history(0.0, 1000.0, 11)

        times = [r[UTC_KEY] for r in history]
        assert len(history) == 11
        assert times[0] == 0.0 and times[-1] == 1000.0
        assert np.allclose(np.diff(times), 100.0)

    def test_records_carry_every_metadata_key(self):
        gen = SineGenerator(make_objects(1)[0])
        keys = {m.key for m in synthetic_metadata()}
        assert set(gen.sample(5.0)) == keys
        assert gen.history(0.0, 1.0, 0) == []

    def test_seed_makes_noise_reproducible(self):
        obj = make_objects(1)[0]
        assert SineGenerator(obj, seed=3).history(0, 10, 5) == SineGenerator(obj, seed=3).history(0, 10, 5)

    def test_amplitude_bounds_signal(self):
        gen = SineGenerator(make_objects(1)[0], amplitude=2.0, noise=0.0)
        values = [r["sin"] for r in gen.history(0.0, 10_000.0, 200)]
        assert max(values) <= 2.0 and min(values) >= -2.0

    def test_time_field_is_the_domain(self):
        domain = [m for m in synthetic_metadata() if m.is_domain]
        assert [m.key for m in domain] == [UTC_KEY]


class TestDemo:
    def test_build_demo_wires_children(self):
        demo = build_demo(2, 10, now_ms=NOW_MS)
        assert len(demo.generators) == 2
        assert demo.conductor.bounds().end == NOW_MS
        assert not demo.conductor.follow()

    def test_headless_run_loads_and_streams(self):
        demo = build_demo(3, 20, now_ms=NOW_MS)
        controller = run_headless(demo, TableSettings(batch_size=7), live_samples=5, rate_hz=10.0)

        assert len(controller.rows) == 3 * 20 + 3 * 5
        assert controller.state.headers == ["Time", "Source", "Sine", "Noise"]
        assert controller.state.default_sort == "Time"
        assert controller.loader.continuations_scheduled == 3 * 3
        controller.destroy()

    def test_headless_run_respects_capacity(self):
        demo = build_demo(2, 50, now_ms=NOW_MS)
        controller = run_headless(demo, TableSettings(max_rows=30), live_samples=10, rate_hz=10.0)

        assert len(controller.rows) == 30
        assert controller.rows.evict_count > 0
        controller.destroy()

    def test_follow_mode_trims_old_rows(self):
        demo = build_demo(1, 61, now_ms=NOW_MS, window_ms=60_000.0, follow=True)
        controller = run_headless(demo, TableSettings(), live_samples=10, rate_hz=1.0)

        # window slid by 10 s: the 10 oldest historical samples fall out
        assert len(controller.rows) == 61 - 10 + 10
        controller.destroy()

    def test_push_live_reaches_every_object(self):
        demo = build_demo(2, 0, now_ms=NOW_MS)
        push_live(demo, NOW_MS + 1)
        for gen in demo.generators:
            live = demo.telemetry.request(gen.obj, TimeBounds(NOW_MS, NOW_MS + 2)).result()
            assert [r[UTC_KEY] for r in live] == [NOW_MS + 1]


class TestMain:
    def test_headless_main(self, monkeypatch):
        monkeypatch.setattr(
            sys, "argv",
            ["telemetry-table", "--headless", "--objects", "2", "--records", "10", "--live", "3"],
        )
        main()

    def test_invalid_batch_size_exits(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["telemetry-table", "--headless", "--batch-size", "0"])
        with pytest.raises(SystemExit):
            main()
