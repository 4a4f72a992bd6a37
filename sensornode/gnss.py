"""GNSS receiver support: NMEA stream splitting, sentence dispatch and a polling reader."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterable, Union

from .nmea import MAX_SENTENCE_LENGTH, SentenceId, sentence_id
from .nmea_sentences import (
    GbsSentence,
    GgaSentence,
    GllSentence,
    GsaSentence,
    GstSentence,
    GsvSentence,
    RmcSentence,
    VtgSentence,
    ZdaSentence,
    parse_gbs,
    parse_gga,
    parse_gll,
    parse_gsa,
    parse_gst,
    parse_gsv,
    parse_rmc,
    parse_vtg,
    parse_zda,
)

logger = logging.getLogger(__name__)

UART_RX_BUF_SIZE = 2048
TASK_PERIOD_S = 0.5

ParsedSentence = Union[
    GbsSentence,
    RmcSentence,
    GgaSentence,
    GllSentence,
    GstSentence,
    GsaSentence,
    GsvSentence,
    VtgSentence,
    ZdaSentence,
]

_PARSERS: dict[SentenceId, Callable[[Union[str, bytes]], ParsedSentence]] = {
    SentenceId.RMC: parse_rmc,
    SentenceId.GBS: parse_gbs,
    SentenceId.GGA: parse_gga,
    SentenceId.GST: parse_gst,
    SentenceId.GSV: parse_gsv,
    SentenceId.GSA: parse_gsa,
    SentenceId.GLL: parse_gll,
    SentenceId.VTG: parse_vtg,
    SentenceId.ZDA: parse_zda,
}


@dataclass(frozen=True)
class GnssSentence:
    """A parsed sentence together with its identifier."""

    sentence_id: SentenceId
    sentence: ParsedSentence


EventHandler = Callable[[GnssSentence], None]


class NmeaStreamParser:
    """Split a byte stream into NMEA sentences and dispatch the selected types."""

    def __init__(
        self,
        handler: EventHandler | None = None,
        parse_sentences: Iterable[SentenceId] = (),
    ) -> None:
        self._handler: EventHandler | None = None
        self._parse_sentences: tuple[SentenceId, ...] = ()
        self._pending = b""
        if handler is not None:
            self.register_event_handler(handler)
        parse_sentences = tuple(parse_sentences)
        if parse_sentences:
            self.update_parse_sentences(parse_sentences)

    @property
    def parse_sentences(self) -> tuple[SentenceId, ...]:
        """Sentence types currently dispatched to the handler."""
        return self._parse_sentences

    def register_event_handler(self, handler: EventHandler) -> None:
        """Set the callable that receives every parsed sentence."""
        if handler is None or not callable(handler):
            raise ValueError("event handler must be callable")
        self._handler = handler

    def update_parse_sentences(self, sentence_ids: Iterable[SentenceId]) -> None:
        """Choose which sentence types are parsed and dispatched."""
        ids = tuple(sentence_ids)
        if not ids or len(ids) >= SentenceId.MAX:
            raise ValueError(f"between 1 and {SentenceId.MAX - 1} sentence types are required")
        converted = []
        for value in ids:
            if not 0 < int(value) < SentenceId.MAX:
                raise ValueError(f"invalid NMEA sentence requested: {value!r}")
            converted.append(SentenceId(int(value)))
            logger.debug("Added %d sentence to parsed sentences", int(value))
        self._parse_sentences = tuple(converted)

    def feed(self, data: bytes) -> list[GnssSentence]:
        """Consume received bytes and return the sentences dispatched from them."""
        buf = self._pending + bytes(data)
        limit = MAX_SENTENCE_LENGTH - 1
        events: list[GnssSentence] = []
        pos = 0
        while pos < len(buf):
            start = buf.find(b"$", pos)
            if start < 0:
                pos = len(buf)
                break
            lf = buf.find(b"\n", start, start + limit)
            if lf < 0:
                # Keep an unfinished sentence only if it can still fit.
                pos = start if len(buf) - start < limit else len(buf)
                break
            events.extend(self.handle_sentence(buf[start : lf + 1]))
            pos = lf + 1
        self._pending = buf[pos:][-(UART_RX_BUF_SIZE - 1) :]
        return events

    def handle_sentence(self, sentence: str | bytes) -> list[GnssSentence]:
        """Parse one complete sentence and dispatch it if its type is selected."""
        if not sentence:
            logger.error("invalid sentence in handle_sentence")
            return []
        if not self._parse_sentences:
            logger.error("no sentence types selected for parsing")
            return []
        if self._handler is None:
            logger.error("no event handler registered")
            return []

        kind = sentence_id(sentence, True)
        if kind <= 0:
            logger.error("invalid sentence")
            return []

        events: list[GnssSentence] = []
        for wanted in self._parse_sentences:
            if wanted != kind:
                continue
            parser = _PARSERS.get(wanted)
            if parser is None:
                logger.error("Unexpected NMEA sentence")
                continue
            try:
                parsed = parser(sentence)
            except ValueError:
                logger.error("Invalid NMEA sentence")
                continue
            event = GnssSentence(kind, parsed)
            self._handler(event)
            events.append(event)
        return events


class GnssModule:
    """Periodically read a receiver stream and feed it to a parser."""

    def __init__(
        self,
        stream: BinaryIO,
        parser: NmeaStreamParser,
        period: float = TASK_PERIOD_S,
    ) -> None:
        if stream is None or parser is None:
            raise ValueError("stream and parser are required")
        if period < 0:
            raise ValueError("period must not be negative")
        self._stream = stream
        self._parser = parser
        self._period = period
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """Whether the background reader is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background reader; does nothing if it already runs."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="nmea-reader", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the background reader and wait for it to finish."""
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        if thread is not threading.current_thread():
            thread.join()
        self._thread = None

    def read_once(self) -> list[GnssSentence]:
        """Read what the stream offers and return the sentences dispatched."""
        data = self._stream.read(UART_RX_BUF_SIZE - 1)
        if not data:
            return []
        return self._parser.feed(data)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.read_once()
            except Exception:
                logger.exception("failed to read from GNSS stream")
            self._stop.wait(self._period)

    def __enter__(self) -> "GnssModule":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()