"""Wake-up scheduling of several BME6xx sensors running heater profiles."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .bme_config import SensorConfig, SensorIndexError, SensorMode

MAX_HEATER_DURATION = 200
GAS_WAIT_SHARED = 120
SENSOR_WAKE_UP_TIME_OFFSET = 10


@dataclass
class ScheduleInfo:
    """When a sensor wakes next and where it is in its profiles."""

    wake_up_time: int = 0
    duty_cycle_index: int = 0
    heater_index: int = 0


@dataclass
class ScheduledSensor:
    """A managed sensor as seen by the scheduler."""

    id: int
    config: SensorConfig = field(default_factory=SensorConfig)
    schedule_info: ScheduleInfo = field(default_factory=ScheduleInfo)


SetMode = Callable[[ScheduledSensor, SensorMode], None]


def _now_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class Scheduler:
    """Choose which sensor to serve next and advance its heater steps."""

    def __init__(self) -> None:
        self._last_scheduled = 0

    @property
    def last_scheduled_index(self) -> int:
        """Index chosen by the last call to schedule_sensor."""
        return self._last_scheduled

    def reset_schedule_data(self, sensor: ScheduledSensor) -> None:
        """Clear the schedule of a sensor."""
        sensor.schedule_info = ScheduleInfo()

    def schedule_wake_up(
        self, sensor: ScheduledSensor, wake_up_time: int, next_heater_index: int
    ) -> None:
        """Set the next wake-up time and heater step of a sensor."""
        sensor.schedule_info.heater_index = next_heater_index
        sensor.schedule_info.wake_up_time = wake_up_time

    def schedule_wake_up_shared(
        self, sensor: ScheduledSensor, timestamp: int, next_heater_index: int
    ) -> None:
        """Schedule a wake-up one shared gas-wait period after ``timestamp``."""
        self.schedule_wake_up(sensor, timestamp + GAS_WAIT_SHARED, next_heater_index)

    def _select(
        self, sensors: Sequence[ScheduledSensor], mode: SensorMode, wake_up_time: int
    ) -> tuple[bool, int]:
        self._last_scheduled = len(sensors)
        for index, sensor in enumerate(sensors):
            if sensor.config.mode == mode and sensor.schedule_info.wake_up_time < wake_up_time:
                wake_up_time = sensor.schedule_info.wake_up_time
                self._last_scheduled = index
        return self._last_scheduled < len(sensors), wake_up_time

    def schedule_sensor(
        self, sensors: Sequence[ScheduledSensor], now: int | None = None
    ) -> bool:
        """Pick the sensor due soonest, preferring running sensors over sleeping ones.

        ``now`` is the current time in milliseconds. Returns False when no sensor
        is due within the wake-up offset.
        """
        if not sensors:
            return False
        wake_up_time = (_now_ms() if now is None else now) + SENSOR_WAKE_UP_TIME_OFFSET
        found, wake_up_time = self._select(sensors, SensorMode.PARALLEL, wake_up_time)
        if found:
            return True
        found, _ = self._select(sensors, SensorMode.SLEEP, wake_up_time)
        return found

    def update_heating_step(
        self,
        sensor: ScheduledSensor,
        current_heater_index: int,
        current_timestamp: int,
        set_mode: SetMode | None = None,
    ) -> None:
        """Advance to the next heater step, sleeping the sensor after its scan cycles.

        ``set_mode`` switches the sensor mode; without it the configured mode is
        updated directly.
        """
        config = sensor.config
        info = sensor.schedule_info
        next_wake_up = current_timestamp + GAS_WAIT_SHARED
        next_heater_index = (current_heater_index + 1) & 0xFF
        if next_heater_index == config.heater_profile.length:
            next_heater_index = 0
            info.duty_cycle_index = (info.duty_cycle_index + 1) & 0xFF
            if info.duty_cycle_index >= config.duty_cycle_profile.num_scans:
                info.duty_cycle_index = 0
                if set_mode is None:
                    config.mode = SensorMode.SLEEP
                else:
                    set_mode(sensor, SensorMode.SLEEP)
                next_wake_up += config.duty_cycle_profile.sleep_duration
        self.schedule_wake_up(sensor, next_wake_up, next_heater_index)

    def last_scheduled_sensor(self, sensors: Sequence[ScheduledSensor]) -> ScheduledSensor:
        """Return the sensor chosen by the last call to schedule_sensor."""
        if not sensors:
            raise ValueError("no sensors given")
        if self._last_scheduled >= len(sensors):
            raise SensorIndexError(f"no sensor at index {self._last_scheduled}")
        return sensors[self._last_scheduled]