"""Synthetic sine/noise telemetry for demos and tests."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from telemetry_table.core.types import DomainObject, Record, TelemetryMetadatum

UTC_KEY = "utc"


def synthetic_metadata() -> list[TelemetryMetadatum]:
    """Fields every synthetic object emits (range fields declared first)."""
    return [
        TelemetryMetadatum(key="source", name="Source"),
        TelemetryMetadatum(key="sin", name="Sine"),
        TelemetryMetadatum(key="noise", name="Noise"),
        TelemetryMetadatum(key=UTC_KEY, name="Time", hints={"x": 1}, format="utc"),
    ]


@dataclass
class SineGenerator:
    """One object's signal: ``amplitude * sin(2π t / period + phase) + noise``."""

    obj: DomainObject
    period_ms: float = 10_000.0
    amplitude: float = 1.0
    phase: float = 0.0
    noise: float = 0.05
    seed: int = 0

    def __post_init__(self) -> None:
        self._rng = np.random.default_rng(self.seed)

    def _records(self, times: np.ndarray) -> list[Record]:
        sin = self.amplitude * np.sin(2.0 * np.pi * times / self.period_ms + self.phase)
        noise = self._rng.normal(0.0, self.noise, size=times.shape)
        return [
            {UTC_KEY: float(t), "source": self.obj.name, "sin": float(s), "noise": float(n)}
            for t, s, n in zip(times, sin, noise)
        ]

    def history(self, start_ms: float, end_ms: float, count: int) -> list[Record]:
        """*count* evenly spaced samples in ``[start_ms, end_ms]``."""
        if count <= 0:
            return []
        return self._records(np.linspace(start_ms, end_ms, count))

    def sample(self, t_ms: float) -> Record:
        return self._records(np.asarray([t_ms], dtype=np.float64))[0]


def make_objects(count: int, prefix: str = "sine") -> list[DomainObject]:
    return [DomainObject(identifier=f"{prefix}-{i}", name=f"Sine {i}") for i in range(count)]
