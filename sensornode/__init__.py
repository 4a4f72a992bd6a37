"""Sensor node components: NMEA/GNSS parsing, alerts, CBOR payloads and gas sensor configuration and scheduling."""

__version__ = "0.1.0"

__all__ = [
    "nmea",
    "nmea_sentences",
    "gnss",
    "alerts",
    "cbor_payload",
    "bme_config",
    "bme_scheduler",
]