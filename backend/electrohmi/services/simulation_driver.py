"""
simulation_driver.py

Purpose:
  Owns the single authoritative simulation state for one PDU: the control
  state, the current sample and the rolling history. Advances the physics
  model once per tick.

State Machine:
  STOPPED --start--> RUNNING
  RUNNING --stop-->  STOPPED
  Initial state is RUNNING unless `autostart=False`.

Concurrency:
  `advance()` is the only writer of the current sample and history. It shares
  one lock with start/stop/set_target_load/set_connected, so a tick never sees
  a half-applied control change. Readers get copies or immutable snapshots.
"""
from __future__ import annotations

import logging
import random
import threading
from typing import Callable, Optional, Tuple

from electrohmi.config import env_flag, env_int
from electrohmi.errors import InvalidControlInput
from electrohmi.models.domain import ControlState, DriverState, PduConfig, TelemetrySample
from electrohmi.services.history_buffer import HistoryBuffer
from electrohmi.services.physics_engine import NoiseSource, seed_sample, step

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LENGTH = 60
DEFAULT_TARGET_LOAD = 40


class SimulationDriver:
    def __init__(
        self,
        cfg: Optional[PduConfig] = None,
        history_length: int = DEFAULT_HISTORY_LENGTH,
        target_load: int = DEFAULT_TARGET_LOAD,
        autostart: bool = True,
        rng: Optional[NoiseSource] = None,
        clock: Optional[Callable[[], int]] = None,
        seed: Optional[TelemetrySample] = None,
    ):
        self.cfg = cfg or PduConfig()
        self._validate_target_load(target_load)

        self._rng = rng or random.Random()
        self._clock = clock
        self._lock = threading.Lock()

        self._control = ControlState(target_load=int(target_load), running=bool(autostart), connected=True)

        initial = seed or seed_sample(self.cfg, timestamp=clock() if clock else None)
        self._current: TelemetrySample = initial
        self._history = HistoryBuffer(history_length, initial)

    @classmethod
    def from_env(cls) -> "SimulationDriver":
        deterministic = env_flag("SIM_DETERMINISTIC", False)
        rng = random.Random(env_int("SIM_SEED", 7)) if deterministic else random.Random()
        return cls(
            history_length=max(1, env_int("HISTORY_LENGTH", DEFAULT_HISTORY_LENGTH)),
            target_load=env_int("INITIAL_TARGET_LOAD", DEFAULT_TARGET_LOAD),
            autostart=env_flag("SIM_AUTOSTART", True),
            rng=rng,
        )

    # -----------------------------
    # Control Surface
    # -----------------------------
    def _validate_target_load(self, value: object) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidControlInput(f"target load must be an integer percentage, got {value!r}")
        lo, hi = int(self.cfg.min_target_load), int(self.cfg.max_target_load)
        if not (lo <= value <= hi):
            raise InvalidControlInput(f"target load {value} outside [{lo}, {hi}]")
        return value

    def set_target_load(self, value: int) -> None:
        try:
            load = self._validate_target_load(value)
        except InvalidControlInput:
            logger.warning("Rejected target load %r", value)
            raise
        with self._lock:
            prev = self._control.target_load
            self._control.target_load = load
        if prev != load:
            logger.info("Target load %d%% -> %d%%", prev, load)

    def start(self) -> None:
        with self._lock:
            was_running = self._control.running
            self._control.running = True
        if not was_running:
            logger.info("Simulation started")

    def stop(self) -> None:
        with self._lock:
            was_running = self._control.running
            self._control.running = False
        if was_running:
            logger.info("Simulation stopped")

    def set_connected(self, connected: bool) -> None:
        with self._lock:
            self._control.connected = bool(connected)

    # -----------------------------
    # Tick
    # -----------------------------
    def advance(self) -> Optional[TelemetrySample]:
        """
        One tick. Returns the new sample, or None when stopped/disconnected
        (history stays frozen).
        """
        with self._lock:
            if not (self._control.running and self._control.connected):
                return None
            sample = step(self._current, self._control.target_load, self._rng, cfg=self.cfg, clock=self._clock)
            self._history.append(sample)
            self._current = sample
            return sample

    # -----------------------------
    # Read Surface
    # -----------------------------
    @property
    def state(self) -> DriverState:
        return DriverState.RUNNING if self._control.running else DriverState.STOPPED

    @property
    def history_capacity(self) -> int:
        return self._history.capacity

    def current_sample(self) -> TelemetrySample:
        return self._current

    def history(self) -> Tuple[TelemetrySample, ...]:
        with self._lock:
            return self._history.snapshot()

    def control_state(self) -> ControlState:
        with self._lock:
            return self._control.model_copy()
