"""Configuration model and JSON loader for BME6xx gas sensor management."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field, replace
from typing import IO, Any, Union

MAX_UNITS = 8
MAX_HEATER_STEPS = 10
DEFAULT_TIME_BASE = 140

ERR_BASE = 0x7700


class SensorMode(enum.Enum):
    """Operation mode of a managed sensor."""

    SLEEP = "sleep"
    PARALLEL = "parallel"


class BmeManagerError(Exception):
    """Base class of sensor manager errors; ``code`` carries the numeric error code."""

    code = ERR_BASE


class SensorIndexError(BmeManagerError):
    """A sensor index does not refer to a managed sensor."""

    code = ERR_BASE + 7


class ConfigFileError(BmeManagerError):
    """The configuration file is unusable for the managed sensors."""

    code = ERR_BASE + 6


class JsonDeserializeError(BmeManagerError):
    """The configuration file is not valid JSON."""

    code = ERR_BASE + 8


@dataclass(frozen=True)
class HeaterProfile:
    """Heater temperature/duration steps and the resulting cycle duration."""

    id: str = ""
    time_base: int = DEFAULT_TIME_BASE
    temperatures: tuple[int, ...] = ()
    durations: tuple[int, ...] = ()
    heat_cycle_duration: int = 0

    @property
    def length(self) -> int:
        """Number of heater steps."""
        return len(self.temperatures)


@dataclass(frozen=True)
class DutyCycleProfile:
    """How many scan cycles run before how many sleep cycles."""

    id: str = ""
    num_scans: int = 0
    num_sleeps: int = 0
    sleep_duration: int = 0


@dataclass
class SensorConfig:
    """Configuration and current mode of one sensor."""

    heater_profile: HeaterProfile = field(default_factory=HeaterProfile)
    duty_cycle_profile: DutyCycleProfile = field(default_factory=DutyCycleProfile)
    mode: SensorMode = SensorMode.SLEEP


Source = Union[str, bytes, bytearray, IO[str], IO[bytes]]


def _get(obj: Any, key: Any) -> Any:
    if isinstance(key, str):
        return obj.get(key) if isinstance(obj, dict) else None
    if isinstance(obj, list) and 0 <= key < len(obj):
        return obj[key]
    return None


def _array(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_int(value: Any, bits: int, signed: bool) -> int:
    if isinstance(value, bool):
        return int(value)
    if not isinstance(value, (int, float)) or value != value:
        return 0
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)
    number = int(value)
    return number if low <= number <= high else 0


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return json.dumps(value, separators=(",", ":"))


def _load(source: Source) -> Any:
    data = source.read() if hasattr(source, "read") else source
    try:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        return json.loads(data)
    except (ValueError, TypeError) as exc:
        raise JsonDeserializeError(f"cannot parse configuration: {exc}") from exc


def _heater_profile(entry: Any) -> HeaterProfile:
    vectors = _array(_get(entry, "temperatureTimeVectors"))
    if len(vectors) > MAX_HEATER_STEPS:
        raise ConfigFileError(f"heater profile has more than {MAX_HEATER_STEPS} steps")
    time_base = _as_int(_get(entry, "timeBase"), 16, True)
    temperatures = tuple(_as_int(_get(v, 0), 16, False) for v in vectors)
    durations = tuple(_as_int(_get(v, 1), 16, False) for v in vectors)
    return HeaterProfile(
        id=_as_str(_get(entry, "id")),
        time_base=time_base,
        temperatures=temperatures,
        durations=durations,
        heat_cycle_duration=sum(d * time_base for d in durations),
    )


def _duty_cycle_profile(entry: Any) -> DutyCycleProfile:
    return DutyCycleProfile(
        id=_as_str(_get(entry, "id")),
        num_scans=_as_int(_get(entry, "numberScanningCycles"), 8, False),
        num_sleeps=_as_int(_get(entry, "numberSleepingCycles"), 8, False),
    )


def deserialize_config(source: Source, count: int) -> list[SensorConfig]:
    """Build configurations for ``count`` sensors from a JSON configuration document.

    Raises JsonDeserializeError for malformed JSON and ConfigFileError when the
    document describes fewer sensors than requested.
    """
    doc = _load(source)
    body = _get(doc, "configBody")
    sensor_cfgs = _array(_get(body, "sensorConfigurations"))
    if count > len(sensor_cfgs):
        raise ConfigFileError(
            f"configuration describes {len(sensor_cfgs)} sensors, {count} required"
        )

    heater_profiles = [_heater_profile(e) for e in _array(_get(body, "heaterProfiles"))]
    duty_profiles = [_duty_cycle_profile(e) for e in _array(_get(body, "dutyCycleProfiles"))]

    configurations: list[SensorConfig] = []
    for entry in sensor_cfgs[:count]:
        config = SensorConfig()
        heater_name = _as_str(_get(entry, "heaterProfile"))
        duty_name = _as_str(_get(entry, "dutyCycleProfile"))
        for profile in heater_profiles:
            if profile.id == heater_name:
                config.heater_profile = profile
        for duty in duty_profiles:
            if duty.id == duty_name:
                config.duty_cycle_profile = duty
        config.duty_cycle_profile = replace(
            config.duty_cycle_profile,
            sleep_duration=config.duty_cycle_profile.num_sleeps
            * config.heater_profile.heat_cycle_duration,
        )
        configurations.append(config)
    return configurations