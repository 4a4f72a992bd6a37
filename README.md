# sensornode

Building blocks for a small environmental sensor node:

- `sensornode.nmea` – low-level NMEA 0183 tools: `checksum`, `check` (structure and checksum validation, optionally strict), the field scanner `scan`, `talker_id`, `sentence_id` returning a `SentenceId`, and the value types `NmeaFloat` (fixed point, with `rescale`, `to_float` and `to_coord`), `NmeaDate`, `NmeaTime` and `NmeaType`.
- `sensornode.nmea_sentences` – parsers `parse_gbs`, `parse_rmc`, `parse_gga`, `parse_gll`, `parse_gst`, `parse_gsa`, `parse_gsv`, `parse_vtg` and `parse_zda`, each returning a frozen dataclass and raising `ValueError` on malformed input; `get_datetime` turns an NMEA date and time into a UTC `datetime`, `get_time` into `(seconds, nanoseconds)` since the epoch.
- `sensornode.gnss` – `NmeaStreamParser` cuts a byte stream into sentences, parses the sentence types you select and passes each result, as a `GnssSentence`, to your handler. `GnssModule` reads from any binary stream, either once (`read_once`) or on a background thread (`start`/`stop`, or as a context manager).
- `sensornode.alerts` – `AlertModule` holds up to ten alerts that can be registered, set, reset and made to expire automatically. `poll` runs one pass and calls the handlers whose `AlertNotify` mask matches; `start`/`stop` run it periodically on a thread.
- `sensornode.cbor_payload` – `encode_sensor_payload` writes a `SensorPayload` with typed `SensorField`s as an indefinite-length CBOR map; `encode_sensor_array` writes several as a CBOR array.
- `sensornode.bme_config` – `deserialize_config` reads a JSON document with heater and duty-cycle profiles and returns one `SensorConfig` per sensor, raising `JsonDeserializeError` or `ConfigFileError` on bad input.
- `sensornode.bme_scheduler` – `Scheduler` picks the sensor to service next (`schedule_sensor`, `last_scheduled_sensor`) and moves each `ScheduledSensor` through its heater steps and duty cycles (`update_heating_step`).

## Installation

```
pip install .
```

Install with `pip install .[test]` to run the tests with `pytest`.

## Examples

Parse a single sentence:

```python
from sensornode.nmea import sentence_id, SentenceId
from sensornode.nmea_sentences import parse_rmc

line = "$GPRMC,081836,A,3751.65,S,14507.36,E,000.0,360.0,130998,011.3,E*62"
assert sentence_id(line, strict=False) is SentenceId.RMC
frame = parse_rmc(line)
print(frame.valid, frame.latitude.to_coord(), frame.longitude.to_coord())
```

Feed a raw stream and receive parsed sentences (only checksummed sentences are accepted):

```python
from sensornode.gnss import NmeaStreamParser
from sensornode.nmea import SentenceId

parser = NmeaStreamParser(print, [SentenceId.GGA, SentenceId.RMC])
events = parser.feed(b"$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,46.9,M,,*47\r\n")
```

Encode a sensor reading as CBOR:

```python
from sensornode.cbor_payload import SensorPayload, SensorField, FieldType, encode_sensor_payload

payload = SensorPayload(
    sensor="bme688",
    timestamp=1700000000,
    fields=[SensorField("temperature", FieldType.FLOAT, 21.5)],
)
data = encode_sensor_payload(payload)
```

Alerts:

```python
from sensornode.alerts import AlertModule, AlertConfig, AlertNotify

alerts = AlertModule(period_ms=100)
alerts.register_alert(AlertConfig(alert_id=1, name="co2", notify_mask=AlertNotify.SET,
                                  state_change_handler=lambda desc: True))
alerts.set_alert(1)
alerts.poll()   # handler returns True, so the alert goes back to NORMAL
```

Gas sensor configuration and scheduling:

```python
from sensornode.bme_config import deserialize_config
from sensornode.bme_scheduler import Scheduler, ScheduledSensor

doc = """{"configBody": {
  "heaterProfiles": [{"id": "h1", "timeBase": 140,
                      "temperatureTimeVectors": [[320, 5], [100, 2]]}],
  "dutyCycleProfiles": [{"id": "d1", "numberScanningCycles": 1,
                         "numberSleepingCycles": 10}],
  "sensorConfigurations": [{"heaterProfile": "h1", "dutyCycleProfile": "d1"}]}}"""

(config,) = deserialize_config(doc, 1)
sensors = [ScheduledSensor(id=1, config=config)]
scheduler = Scheduler()
if scheduler.schedule_sensor(sensors, now=0):
    sensor = scheduler.last_scheduled_sensor(sensors)
```

## What it does not do

The package works on data and streams you hand it. It does not open serial ports
or talk to sensor chips itself: `GnssModule` reads from a stream object you supply,
and `Scheduler` only updates `ScheduledSensor` records, switching modes through the
optional `set_mode` callback. There is no command-line program, no network
transport for the CBOR payloads and no storage.