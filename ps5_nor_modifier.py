#!/usr/bin/env python3
"""
ps5_nor_modifier.py — PS5 Debug UART & Error-Code Tool
=======================================================

Talks to the PS5 southbridge debug UART over a USB/TTL serial adapter,
reads and clears the console's error log, and resolves the error codes it
reports against the uartcodes.com directory (offline snapshot or online
query). Also loads and saves NOR dumps through an editable hex view.

Architecture:
    Single-file module with a CLI front-end. The backend facade exposes a
    small function-call surface plus an event stream (status, error,
    progress, results) so any front-end can drive it without bindings.

Wire protocol:
    Host → console:  "<command>:<CS>\\n"   (CS = sum of UTF-16 code units
                                           mod 256, two uppercase hex digits)
    Console → host:  UTF-8 text, no fixed terminator. The reply is read
                     with a long wait for the first byte and a short idle
                     wait for the rest.

Status:
    NOR field decoding (model, serials, MAC addresses) is not implemented.
    Load/save pass the bytes through untouched; NorCodec is the place to
    add it once the memory map is documented.

Requires: Python 3.10+, pyserial, requests, rich

MIT License

Copyright (c) 2026 The PS5 NOR Modifier contributors

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""


# ═══════════════════════════════════════════════════════════════════════
# SECTION 0 — IMPORTS & GLOBALS
# ═══════════════════════════════════════════════════════════════════════

from __future__ import annotations

import io
import os
import sys
import time
import logging
import argparse
import tempfile
import threading
import xml.etree.ElementTree as ET
from pathlib import Path
from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Callable, List, Tuple, Dict, Any, Iterator, BinaryIO
from urllib.parse import urlparse, parse_qs
from urllib.request import url2pathname

import requests
import serial
import serial.tools.list_ports
from rich.logging import RichHandler

# ── Version & Metadata ──
__version__ = "0.1.0"
__app_name__ = "PS5 NOR Modifier"

APP_FOLDER = "PS5NorModifier"
LOGGER_NAME = "ps5_nor_modifier"


def default_data_dir() -> Path:
    """Per-user application data directory (not created here)."""
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming")
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share")
    return base / APP_FOLDER


def setup_logging(
    name: str = LOGGER_NAME,
    level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
    log_dir: Optional[Path] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure and return a logger.

    Args:
        name:          Logger name and log-file prefix.
        level:         Root level (DEBUG captures everything to file).
        console_level: Level for console/terminal output.
        log_dir:       Override log directory (default: <data dir>/logs).
        rich_console:  Use Rich handler for console output.

    Returns:
        Configured ``logging.Logger`` instance.

    Log files: ``<log_dir>/<name>_YYYYMMDD_HHMMSS.log``
    """
    log_dir = log_dir or default_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(level)

    # ── File handler: captures everything (DEBUG+) ──
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{name}_{ts}.log"
    file_fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(file_fmt)
    logger.addHandler(fh)

    # ── Console handler: only important stuff (WARNING+ default) ──
    if rich_console:
        ch = RichHandler(
            level=console_level,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S",
        ))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.info("=" * 60)
    logger.info("Logger initialized: %s", name)
    logger.info("Log file: %s", log_file)
    logger.info("Console level: %s", logging.getLevelName(console_level))
    logger.info("=" * 60)

    return logger

log = logging.getLogger(LOGGER_NAME)


# ═══════════════════════════════════════════════════════════════════════
# SECTION 1 — CONSTANTS
# ═══════════════════════════════════════════════════════════════════════

# Debug UART line settings: 115200 8N1, no flow control
DEFAULT_BAUD = 115200
WRITE_TIMEOUT_MS = 1000
RESPONSE_TIMEOUT_MS = 3000   # wait for the first reply byte
IDLE_TIMEOUT_MS = 100        # wait for each further burst
POLL_INTERVAL_MS = 5

# Error-code directory service
DIRECTORY_URL = "http://uartcodes.com/xml.php"
DATABASE_FILENAME = "errorDB.xml"
QUERY_PARAM = "errorCode"
HTTP_TIMEOUT_S = 10.0

# XML record schema: <errorCode><ErrorCode/><Description/></errorCode>
RECORD_TAG = "errorCode"
CODE_TAG = "ErrorCode"
DESCRIPTION_TAG = "Description"

# Error log slots read by "errlog N"
ERRLOG_INDICES = range(0, 11)
ERRLOG_CLEAR_COMMAND = "errlog clear"

# Replies starting with one of these mark a failed exchange
ERROR_MARKERS = ("Error", "NG")


# ═══════════════════════════════════════════════════════════════════════
# SECTION 2 — ERRORS
# ═══════════════════════════════════════════════════════════════════════

class NorModifierError(Exception):
    """Base class. ``title`` is the heading shown with the error message."""
    title = "Error"


class TransportError(NorModifierError):
    """Serial transport failure."""
    title = "Serial Port Error"

class WorkflowError(NorModifierError):
    """Multi-command workflow could not run."""
    title = "Serial Command Error"

class NotConnectedError(TransportError, WorkflowError):
    title = "Serial Command Error"

class PortUnavailableError(TransportError):
    title = "Serial Connection Failed"

class WriteTimeoutError(TransportError):
    title = "Serial Command Error"

class NoResponseError(TransportError):
    title = "Serial Command Error"


class DirectoryError(NorModifierError):
    """Error-code directory failure (offline snapshot or online service)."""
    title = "Database Error"

class InvalidInputError(DirectoryError):
    title = "Input Error"

class DirectoryMissingError(DirectoryError):
    pass

class DirectoryUnreadableError(DirectoryError):
    pass

class DirectoryCorruptError(DirectoryError):
    pass

class NetworkError(DirectoryError):
    title = "Network Error"

class StorageError(DirectoryError):
    pass


class FileAccessError(NorModifierError):
    """Local file could not be read or written."""
    title = "File Error"

class MissingFileError(FileAccessError):
    pass

class FilePermissionError(FileAccessError):
    pass

class MalformedHexError(FileAccessError, ValueError):
    """Hex text has odd length or a non-hex character."""


# ═══════════════════════════════════════════════════════════════════════
# SECTION 3 — EVENTS
# ═══════════════════════════════════════════════════════════════════════

class EventEmitter:
    """Minimal observer hub shared by the session, directory and backend."""

    def __init__(self) -> None:
        self._callbacks: Dict[str, List[Callable]] = {}

    def on(self, event: str, callback: Callable) -> None:
        """Register an event callback."""
        self._callbacks.setdefault(event, []).append(callback)

    def emit(self, event: str, **kwargs) -> None:
        """Emit an event to all registered callbacks."""
        for cb in list(self._callbacks.get(event, [])):
            try:
                cb(**kwargs)
            except Exception as e:
                log.error("Event callback error (%s): %s", event, e)


def _spawn(target: Callable, name: str, *args) -> threading.Thread:
    thread = threading.Thread(target=target, args=args, name=name, daemon=True)
    thread.start()
    return thread


# ═══════════════════════════════════════════════════════════════════════
# SECTION 4 — HEX CODEC
# ═══════════════════════════════════════════════════════════════════════

def hex_encode(data: bytes) -> str:
    """Render bytes as lowercase hex pairs separated by single spaces."""
    return bytes(data).hex(" ")


def hex_decode(text: str) -> bytes:
    """
    Parse hex text back to bytes. All whitespace is ignored.

    Raises:
        MalformedHexError: odd digit count or a non-hex character.
    """
    cleaned = "".join(text.split())
    if len(cleaned) % 2:
        raise MalformedHexError(f"Hex text has an odd number of digits ({len(cleaned)})")
    try:
        return bytes.fromhex(cleaned)
    except ValueError as e:
        raise MalformedHexError(f"Invalid hex text: {e}") from e


# ═══════════════════════════════════════════════════════════════════════
# SECTION 5 — UART COMMAND FRAMING
# ═══════════════════════════════════════════════════════════════════════

class UartProtocol:
    """
    Debug UART command framing.

    Frame: ``<command>:<CS>\\n`` encoded as UTF-8, where CS is the sum of
    the command's UTF-16 code units masked to 8 bits, rendered as two
    uppercase hex digits.
    """

    SEPARATOR = ":"
    TERMINATOR = "\n"

    @staticmethod
    def compute_checksum(command: str) -> int:
        units = command.encode("utf-16-le")
        total = sum(int.from_bytes(units[i:i + 2], "little") for i in range(0, len(units), 2))
        return total & 0xFF

    @staticmethod
    def format_checksum(command: str) -> str:
        return f"{UartProtocol.compute_checksum(command):02X}"

    @staticmethod
    def frame_text(command: str) -> str:
        return f"{command}{UartProtocol.SEPARATOR}{UartProtocol.format_checksum(command)}{UartProtocol.TERMINATOR}"

    @staticmethod
    def frame(command: str) -> bytes:
        """Build the wire bytes for *command*. Recomputed on every call."""
        return UartProtocol.frame_text(command).encode("utf-8")

    @staticmethod
    def parse_frame(line: str) -> Tuple[str, bool]:
        """Split a framed line into (command, checksum_ok)."""
        body = line.rstrip("\r\n")
        command, sep, checksum = body.rpartition(UartProtocol.SEPARATOR)
        if not sep or len(checksum) != 2:
            return body, False
        return command, checksum.upper() == UartProtocol.format_checksum(command)


def is_error_response(response: str) -> bool:
    return response.startswith(ERROR_MARKERS)


# ═══════════════════════════════════════════════════════════════════════
# SECTION 6 — TRANSPORT LAYER (Serial / Loopback)
# ═══════════════════════════════════════════════════════════════════════

class BaseTransport:
    """Abstract base for byte transports used by SerialSession."""

    port: str = ""

    def open(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def write(self, data: bytes) -> int:
        raise NotImplementedError

    def wait_for_bytes_written(self, timeout_ms: int) -> bool:
        raise NotImplementedError

    def read(self, count: int) -> bytes:
        raise NotImplementedError

    @property
    def is_open(self) -> bool:
        raise NotImplementedError

    @property
    def bytes_available(self) -> int:
        raise NotImplementedError


class PySerialTransport(BaseTransport):
    """PySerial (COM port / tty) transport with the fixed 8N1 line settings."""

    def __init__(self, port: str, baud: int = DEFAULT_BAUD, write_timeout_ms: int = WRITE_TIMEOUT_MS):
        self.port = port
        self.baud = baud
        self.write_timeout_ms = write_timeout_ms
        self._serial: Optional[serial.Serial] = None

    def open(self) -> None:
        try:
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
                timeout=0,
                write_timeout=self.write_timeout_ms / 1000.0,
            )
            log.info("Opened %s at %d baud", self.port, self.baud)
        except serial.SerialException as e:
            raise PortUnavailableError(f"Could not connect to {self.port}: {e}") from e

    def close(self) -> None:
        if self._serial and self._serial.is_open:
            self._serial.close()
            log.info("Closed %s", self.port)

    def write(self, data: bytes) -> int:
        if not self.is_open:
            raise NotConnectedError("Serial port is not connected.")
        return self._serial.write(data)

    def wait_for_bytes_written(self, timeout_ms: int) -> bool:
        deadline = time.monotonic() + timeout_ms / 1000.0
        while self._serial.out_waiting:
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.001)
        return True

    def read(self, count: int) -> bytes:
        return bytes(self._serial.read(count))

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    @property
    def bytes_available(self) -> int:
        return self._serial.in_waiting

    @staticmethod
    def list_ports() -> List[str]:
        """List available serial ports."""
        return [p.device for p in serial.tools.list_ports.comports()]


class LoopbackTransport(BaseTransport):
    """
    In-memory stand-in for the console's debug UART.

    Validates the frame checksum of every write and queues a framed reply:
    ``errlog N`` and ``errlog clear`` get an ``OK`` line, commands listed in
    *responses* get their canned text, anything else (or a bad checksum)
    gets ``NG``. Commands in *silent* get no reply at all.
    """

    def __init__(self, port: str = "LOOPBACK", responses: Optional[Dict[str, str]] = None,
                 silent: Tuple[str, ...] = ()):
        self.port = port
        self.responses = dict(responses or {})
        self.silent = set(silent)
        self.tx_log: List[bytes] = []
        self.stall_writes = False
        self._rx_buffer = bytearray()
        self._opened = False
        self._unplugged = False

    def open(self) -> None:
        if self._unplugged:
            raise PortUnavailableError(f"Could not connect to {self.port}: device not present")
        self._opened = True
        log.info("Loopback transport %s opened (simulation mode)", self.port)

    def close(self) -> None:
        self._opened = False

    def unplug(self) -> None:
        """Simulate the adapter being pulled while the port is open."""
        self._unplugged = True

    def write(self, data: bytes) -> int:
        self._check_present()
        self.tx_log.append(bytes(data))
        reply = self._simulate_response(data.decode("utf-8", errors="replace"))
        if reply is not None:
            self._rx_buffer.extend(UartProtocol.frame(reply))
        return len(data)

    def wait_for_bytes_written(self, timeout_ms: int) -> bool:
        return not self.stall_writes

    def read(self, count: int) -> bytes:
        self._check_present()
        result = bytes(self._rx_buffer[:count])
        del self._rx_buffer[:count]
        return result

    @property
    def is_open(self) -> bool:
        return self._opened

    @property
    def bytes_available(self) -> int:
        self._check_present()
        return len(self._rx_buffer)

    @property
    def sent_commands(self) -> List[str]:
        return [UartProtocol.parse_frame(f.decode("utf-8"))[0] for f in self.tx_log]

    def _check_present(self) -> None:
        if self._unplugged:
            raise serial.SerialException("device reports readiness to read but returned no data "
                                         "(device disconnected or multiple access on port?)")

    def _simulate_response(self, line: str) -> Optional[str]:
        command, ok = UartProtocol.parse_frame(line)
        if not ok:
            return "NG"
        if command in self.silent:
            return None
        if command in self.responses:
            return self.responses[command]
        if command == ERRLOG_CLEAR_COMMAND:
            return "OK 00000000"
        verb, _, arg = command.partition(" ")
        if verb == "errlog" and arg.isdigit():
            return f"OK 00000000 {int(arg):02d} FFFFFFFF"
        return "NG"


# ═══════════════════════════════════════════════════════════════════════
# SECTION 7 — SERIAL SESSION
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class SessionConfig:
    """Serial session configuration. Line format is always 8N1."""
    baud: int = DEFAULT_BAUD
    write_timeout_ms: int = WRITE_TIMEOUT_MS
    response_timeout_ms: int = RESPONSE_TIMEOUT_MS
    idle_timeout_ms: int = IDLE_TIMEOUT_MS
    poll_interval_ms: int = POLL_INTERVAL_MS


class ExchangePhase(Enum):
    AWAIT_FIRST = auto()
    DRAINING = auto()
    DONE = auto()


class ResponseCollector:
    """
    Two-phase reply reader.

    AWAIT_FIRST waits up to *first_byte_timeout_ms* for anything to arrive.
    Once bytes show up it switches to DRAINING, where every new burst pushes
    the deadline *idle_timeout_ms* further out. When the line stays quiet
    past that deadline the reply is complete (DONE).

    ``clock`` and ``sleep`` are injectable so the state machine can be
    stepped with a fake time source.
    """

    def __init__(self, transport: BaseTransport, first_byte_timeout_ms: int = RESPONSE_TIMEOUT_MS,
                 idle_timeout_ms: int = IDLE_TIMEOUT_MS, poll_interval_ms: int = POLL_INTERVAL_MS,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.transport = transport
        self.first_byte_timeout = first_byte_timeout_ms / 1000.0
        self.idle_timeout = idle_timeout_ms / 1000.0
        self.poll_interval = poll_interval_ms / 1000.0
        self.clock = clock
        self.sleep = sleep
        self.phase = ExchangePhase.AWAIT_FIRST
        self.buffer = bytearray()
        self.deadline: Optional[float] = None

    def step(self) -> ExchangePhase:
        """Advance the state machine by one poll."""
        now = self.clock()
        if self.deadline is None:
            self.deadline = now + self.first_byte_timeout

        waiting = self.transport.bytes_available
        if waiting:
            self.buffer.extend(self.transport.read(waiting))
            self.phase = ExchangePhase.DRAINING
            self.deadline = now + self.idle_timeout
        elif now >= self.deadline:
            if self.phase is ExchangePhase.AWAIT_FIRST:
                raise NoResponseError("No response from serial device.")
            self.phase = ExchangePhase.DONE
        return self.phase

    def collect(self) -> bytes:
        """Run to completion and return every byte received."""
        while self.step() is not ExchangePhase.DONE:
            self.sleep(self.poll_interval)
        return bytes(self.buffer)


class SerialSession(EventEmitter):
    """
    Owns the one serial connection to the console.

    Events: connection_changed(connected, port), current_port_changed(port),
    error(title, message), progress(current, total, label).
    """

    def __init__(self, config: Optional[SessionConfig] = None,
                 transport_factory: Optional[Callable[[str], BaseTransport]] = None,
                 port_lister: Optional[Callable[[], List[str]]] = None):
        super().__init__()
        self.config = config or SessionConfig()
        self._transport_factory = transport_factory or self._pyserial_factory
        self._port_lister = port_lister or PySerialTransport.list_ports
        self.available_ports: List[str] = []
        self.current_port = ""
        self.transport: Optional[BaseTransport] = None
        self._lock = threading.RLock()

    def _pyserial_factory(self, port: str) -> BaseTransport:
        return PySerialTransport(port, self.config.baud, self.config.write_timeout_ms)

    @property
    def is_open(self) -> bool:
        return self.transport is not None and self.transport.is_open

    @property
    def active_port(self) -> Optional[str]:
        return self.transport.port if self.is_open else None

    # ── Port discovery ──

    def list_ports(self) -> List[str]:
        """Re-scan ports. Picks the first one as default if nothing is selected."""
        self.available_ports = list(self._port_lister())
        log.debug("Available ports: %s", self.available_ports)
        if self.available_ports and not self.current_port:
            self.select_port(self.available_ports[0])
        return list(self.available_ports)

    def select_port(self, port: str) -> None:
        if port != self.current_port:
            self.current_port = port
            self.emit("current_port_changed", port=port)

    # ── Lifecycle ──

    def open(self, port: Optional[str] = None) -> bool:
        """
        Open *port* (default: the selected port).

        Returns False when that port is already open, True when a new
        connection was made. Any other open port is closed first.
        """
        port = port or self.current_port
        if not port:
            raise PortUnavailableError("No serial port selected.")

        with self._lock:
            if self.is_open:
                if self.transport.port == port:
                    log.debug("Already connected to %s", port)
                    return False
                self._close_locked()
            transport = self._transport_factory(port)
            transport.open()
            self.transport = transport

        self.select_port(port)
        log.info("Connected to %s", port)
        self.emit("connection_changed", connected=True, port=port)
        return True

    def close(self) -> bool:
        """Close the port. Returns False if nothing was open."""
        with self._lock:
            if not self.is_open:
                return False
            self._close_locked()
            return True

    def _close_locked(self) -> None:
        port = self.transport.port
        self.transport.close()
        self.transport = None
        log.info("Disconnected from %s", port)
        self.emit("connection_changed", connected=False, port=port)

    # ── Exchange ──

    def exchange(self, command: str) -> str:
        """
        Send one framed command and return the trimmed reply text.

        Blocks for up to write_timeout + response_timeout (+ drain time).
        Concurrent callers are serialized.

        Raises:
            NotConnectedError, WriteTimeoutError, NoResponseError,
            TransportError (port fault).
        """
        with self._lock:
            if not self.is_open:
                raise NotConnectedError("Serial port is not connected.")
            transport = self.transport
            wire = UartProtocol.frame(command)
            log.debug("TX [%d]: %r", len(wire), wire)
            try:
                transport.write(wire)
                if not transport.wait_for_bytes_written(self.config.write_timeout_ms):
                    raise WriteTimeoutError(f"Timeout writing to serial port for command: {command}")
                raw = ResponseCollector(
                    transport,
                    first_byte_timeout_ms=self.config.response_timeout_ms,
                    idle_timeout_ms=self.config.idle_timeout_ms,
                    poll_interval_ms=self.config.poll_interval_ms,
                ).collect()
            except NoResponseError:
                raise NoResponseError(f"No response from serial device for command: {command}") from None
            except serial.SerialTimeoutException as e:
                raise WriteTimeoutError(f"Timeout writing to serial port for command: {command}") from e
            except OSError as e:
                # SerialException, or a bare OSError from ioctl on a removed adapter
                self.report_transport_error(e)
                raise TransportError(f"Serial port error: {e}") from e

        response = raw.decode("utf-8", errors="replace").strip()
        log.debug("RX [%d]: %s", len(raw), response)
        return response

    def report_transport_error(self, exc: Exception) -> bool:
        """
        Surface a transport fault as an ``error`` event.

        Timeouts are left to the exchange logic and are not reported.
        Returns True if an event was emitted.
        """
        if isinstance(exc, serial.SerialTimeoutException):
            return False
        message = f"Serial port error: {exc}"
        log.error(message)
        self.emit("error", title=TransportError.title, message=message)
        return True


# ═══════════════════════════════════════════════════════════════════════
# SECTION 8 — ERROR-CODE DIRECTORY
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ErrorRecord:
    code: str
    description: str

    def display(self) -> str:
        return f"Error code: {self.code}\nDescription: {self.description}"


def format_not_found(code: str, where: str) -> str:
    return f"Error code: {code}\nDescription: Not found in {where} database."


@dataclass
class DirectoryConfig:
    url: str = DIRECTORY_URL
    data_dir: Path = field(default_factory=default_data_dir)
    http_timeout_s: float = HTTP_TIMEOUT_S
    filename: str = DATABASE_FILENAME

    @property
    def database_path(self) -> Path:
        return Path(self.data_dir) / self.filename


def iter_error_records(source: BinaryIO) -> Iterator[ErrorRecord]:
    """Stream ``errorCode`` records from an XML document in document order."""
    root = None
    for event, elem in ET.iterparse(source, events=("start", "end")):
        if root is None:
            root = elem
        if event != "end" or elem.tag != RECORD_TAG:
            continue
        record = ErrorRecord(
            code=elem.findtext(CODE_TAG, default=""),
            description=elem.findtext(DESCRIPTION_TAG, default=""),
        )
        # Detach finished records from the root
        root.clear()
        yield record


def find_error_record(source: BinaryIO, code: str, match_any: bool = False) -> Optional[ErrorRecord]:
    """
    Return the first record whose code equals *code* (or the first record
    at all with *match_any*), stopping as soon as it is found.

    Raises:
        DirectoryCorruptError: the XML is malformed before a match.
    """
    try:
        for record in iter_error_records(source):
            if match_any or record.code == code:
                return record
    except ET.ParseError as e:
        raise DirectoryCorruptError(f"Error parsing error-code XML: {e}") from e
    return None


def canonical_query_code(url: str) -> str:
    """The errorCode query parameter of *url*, or "" if absent."""
    values = parse_qs(urlparse(url).query).get(QUERY_PARAM)
    return values[0] if values else ""


class ErrorDirectory(EventEmitter):
    """
    Error-code lookups against the local snapshot or the online service.

    Events: lookup_finished(code, record, error), refresh_finished(success, error).
    """

    def __init__(self, config: Optional[DirectoryConfig] = None):
        super().__init__()
        self.config = config or DirectoryConfig()

    @property
    def database_path(self) -> Path:
        return self.config.database_path

    def has_snapshot(self) -> bool:
        return self.database_path.is_file()

    # ── Offline ──

    def lookup_offline(self, code: str) -> Optional[ErrorRecord]:
        """Look *code* up in the local snapshot. None means not found."""
        path = self.database_path
        if not path.exists():
            raise DirectoryMissingError(
                f"Local database ({self.config.filename}) not found. Please download it first.")
        try:
            fh = open(path, "rb")
        except OSError as e:
            raise DirectoryUnreadableError(f"Could not open local database file: {e}") from e
        with fh:
            record = find_error_record(fh, code)
        log.debug("Offline lookup %s -> %s", code, record)
        return record

    # ── Online ──

    def fetch_online(self, code: str) -> Optional[ErrorRecord]:
        """Blocking online lookup."""
        if not code:
            raise InvalidInputError("Please enter an error code.")
        try:
            response = requests.get(self.config.url, params={QUERY_PARAM: code},
                                    timeout=self.config.http_timeout_s)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"Error checking error code online: {e}") from e

        # Resolve against what was actually sent, not what the caller passed
        request_url = response.request.url if response.request is not None else response.url
        canonical = canonical_query_code(request_url)
        record = find_error_record(io.BytesIO(response.content), canonical, match_any=not canonical)
        log.debug("Online lookup %s -> %s", canonical, record)
        return record

    def lookup_online(self, code: str) -> threading.Thread:
        """
        Start an online lookup in the background.

        The outcome arrives as ``lookup_finished``. An empty code fails
        immediately with InvalidInputError.
        """
        if not code:
            raise InvalidInputError("Please enter an error code.")
        return _spawn(self._run_online_lookup, "errorcode-lookup", code)

    def _run_online_lookup(self, code: str) -> None:
        try:
            record = self.fetch_online(code)
        except DirectoryError as e:
            log.warning("Online lookup failed: %s", e)
            self.emit("lookup_finished", code=code, record=None, error=e)
            return
        self.emit("lookup_finished", code=code, record=record, error=None)

    # ── Snapshot refresh ──

    def refresh(self) -> Path:
        """Download the full directory and replace the local snapshot."""
        try:
            response = requests.get(self.config.url, timeout=self.config.http_timeout_s)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"Error downloading database: {e}") from e

        path = self.database_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".errorDB-", suffix=".tmp", dir=str(path.parent))
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(response.content)
                os.replace(tmp, path)
            except OSError:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise StorageError(f"Could not save database file: {e}") from e

        log.info("Offline database updated: %s (%d bytes)", path, len(response.content))
        return path

    def refresh_async(self) -> threading.Thread:
        return _spawn(self._run_refresh, "errorcode-refresh")

    def _run_refresh(self) -> None:
        try:
            self.refresh()
        except DirectoryError as e:
            log.warning("Database refresh failed: %s", e)
            self.emit("refresh_finished", success=False, error=e)
            return
        self.emit("refresh_finished", success=True, error=None)


# ═══════════════════════════════════════════════════════════════════════
# SECTION 9 — ERROR LOG WORKFLOW
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class LogEntry:
    command: str
    response: str
    failed: bool = False


@dataclass
class LogReport:
    entries: List[LogEntry] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        return any(e.failed for e in self.entries)

    @property
    def text(self) -> str:
        return "\n".join(f"{e.command}: {e.response}" for e in self.entries)


class ErrorLogWorkflow:
    """
    Reads every error log slot (``errlog 0`` .. ``errlog 10``) or clears them.

    Worst case ~34 s blocking for a full read; run it off the UI thread.
    """

    def __init__(self, session: SerialSession):
        self.session = session

    def collect_all(self) -> LogReport:
        if not self.session.is_open:
            raise NotConnectedError("Serial port is not connected.")

        report = LogReport()
        total = len(ERRLOG_INDICES)
        for n, index in enumerate(ERRLOG_INDICES, start=1):
            command = f"errlog {index}"
            try:
                response = self.session.exchange(command)
            except TransportError as e:
                response = f"Error: {e}"
            report.entries.append(LogEntry(command, response, is_error_response(response)))
            self.session.emit("progress", current=n, total=total, label="Reading error logs")

        if report.partial_failure:
            failed = sum(1 for e in report.entries if e.failed)
            log.warning("Error log read: %d of %d slots failed", failed, total)
        return report

    def clear(self) -> str:
        if not self.session.is_open:
            raise NotConnectedError("Serial port is not connected.")
        return self.session.exchange(ERRLOG_CLEAR_COMMAND)


# ═══════════════════════════════════════════════════════════════════════
# SECTION 10 — NOR FILE LOAD / SAVE
# ═══════════════════════════════════════════════════════════════════════

def clean_file_path(path) -> Path:
    """Accept plain paths or ``file://`` URLs from file dialogs."""
    text = str(path)
    if text.startswith("file://"):
        return Path(url2pathname(urlparse(text).path))
    return Path(text)


def _file_error(exc: OSError, action: str, path: Path) -> FileAccessError:
    if isinstance(exc, FileNotFoundError):
        cls = MissingFileError
    elif isinstance(exc, PermissionError):
        cls = FilePermissionError
    else:
        cls = FileAccessError
    return cls(f"Could not {action} {path}: {exc.strerror or exc}")


@dataclass(frozen=True)
class LoadedFileBuffer:
    path: Path
    data: bytes
    hex_text: str
    details: Dict[str, Any] = field(default_factory=dict)


class NorCodec:
    """
    NOR field codec. Pass-through: no field is decoded or edited until the
    memory map is documented against real hardware.
    """

    FIELDS = ("model", "variant", "board_serial", "console_serial", "wifi_mac", "lan_mac")

    def parse_details(self, data: bytes) -> Dict[str, Any]:
        details: Dict[str, Any] = {name: None for name in self.FIELDS}
        details["size"] = len(data)
        return details

    def apply_modifications(self, data: bytes, modifications: Dict[str, Any]) -> bytes:
        if modifications:
            log.warning("NOR field editing not implemented; ignoring %s", sorted(modifications))
        return bytes(data)


class NorFile:
    """Load/save dumps through the hex view."""

    def __init__(self, codec: Optional[NorCodec] = None):
        self.codec = codec or NorCodec()

    @staticmethod
    def read_bytes(path) -> bytes:
        p = clean_file_path(path)
        try:
            with open(p, "rb") as fh:
                return fh.read()
        except OSError as e:
            raise _file_error(e, "open file", p) from e

    @staticmethod
    def write_bytes(path, data: bytes) -> Path:
        p = clean_file_path(path)
        try:
            with open(p, "wb") as fh:
                fh.write(data)
        except OSError as e:
            raise _file_error(e, "write file", p) from e
        return p

    def load(self, path) -> LoadedFileBuffer:
        p = clean_file_path(path)
        data = self.read_bytes(p)
        log.info("Loaded %s (%d bytes)", p, len(data))
        return LoadedFileBuffer(p, data, hex_encode(data), self.codec.parse_details(data))

    def save(self, path, hex_text: str) -> Path:
        """Decode *hex_text* and write it. Nothing is written if decoding fails."""
        data = hex_decode(hex_text)
        p = self.write_bytes(path, data)
        log.info("Saved %s (%d bytes)", p, len(data))
        return p

    def save_modified(self, path, original_path, modifications: Dict[str, Any]) -> Path:
        """Read *original_path*, apply *modifications* via the codec, write to *path*."""
        data = self.codec.apply_modifications(self.read_bytes(original_path), modifications)
        p = self.write_bytes(path, data)
        log.info("Saved modified dump %s (%d bytes)", p, len(data))
        return p


# ═══════════════════════════════════════════════════════════════════════
# SECTION 11 — BACKEND FACADE
# ═══════════════════════════════════════════════════════════════════════

class NorModifierBackend(EventEmitter):
    """
    Function-call surface for a front-end.

    Every call updates ``status_message``; failures also emit
    ``error(title, message)``. Network calls and the full log read finish
    in the background and report through events:

        status(message)                    ports_changed(ports)
        current_port_changed(port)         connection_changed(connected)
        error(title, message)              file_opened(path, hex_text, details)
        online_result(result)              database_download_finished(success)
        all_error_logs(data, partial_failure)
        error_logs_cleared(result)         progress(current, total, label)
    """

    def __init__(self, session: Optional[SerialSession] = None,
                 directory: Optional[ErrorDirectory] = None,
                 nor_file: Optional[NorFile] = None):
        super().__init__()
        self.session = session or SerialSession()
        self.directory = directory or ErrorDirectory()
        self.nor_file = nor_file or NorFile()
        self.workflow = ErrorLogWorkflow(self.session)
        self._status = ""

        self.session.on("error", self._on_transport_error)
        self.session.on("connection_changed",
                        lambda connected, port=None: self.emit("connection_changed", connected=connected))
        self.session.on("current_port_changed", lambda port: self.emit("current_port_changed", port=port))
        self.session.on("progress", lambda **kw: self.emit("progress", **kw))
        self.directory.on("lookup_finished", self._on_lookup_finished)
        self.directory.on("refresh_finished", self._on_refresh_finished)

    # ── Status ──

    @property
    def status_message(self) -> str:
        return self._status

    @status_message.setter
    def status_message(self, message: str) -> None:
        if message != self._status:
            self._status = message
            self.emit("status", message=message)

    def _report(self, exc: NorModifierError, status: Optional[str] = None) -> None:
        self.status_message = status or f"Error: {exc}"
        self.emit("error", title=exc.title, message=str(exc))

    def _on_transport_error(self, title: str, message: str) -> None:
        self.status_message = message
        self.emit("error", title=title, message=message)

    # ── Properties ──

    @property
    def local_database_file(self) -> Path:
        return self.directory.database_path

    @property
    def available_serial_ports(self) -> List[str]:
        return list(self.session.available_ports)

    @property
    def current_serial_port(self) -> str:
        return self.session.current_port

    @property
    def is_serial_port_connected(self) -> bool:
        return self.session.is_open

    # ── Serial ──

    def refresh_ports(self) -> List[str]:
        ports = self.session.list_ports()
        self.emit("ports_changed", ports=ports)
        self.status_message = "Serial ports refreshed."
        return ports

    def select_port(self, port: str) -> None:
        self.session.select_port(port)

    def connect(self, port: Optional[str] = None) -> bool:
        try:
            opened = self.session.open(port)
        except TransportError as e:
            self._report(e, status=str(e))
            self.emit("connection_changed", connected=False)
            return False
        active = self.session.active_port
        self.status_message = f"Connected to {active}" if opened else f"Already connected to {active}"
        return True

    def disconnect(self) -> None:
        if self.session.close():
            self.status_message = "Disconnected from serial port."
        else:
            self.status_message = "No serial port is currently connected."

    def send_command(self, command: str) -> str:
        try:
            response = self.session.exchange(command)
        except TransportError as e:
            self._report(e, status=str(e))
            return f"Error: {e}"
        self.status_message = f"Command sent. Response: {response}"
        return response

    def read_all_error_logs(self) -> threading.Thread:
        """Read every log slot in the background; result arrives as ``all_error_logs``."""
        self.status_message = "Reading error logs..."
        return _spawn(self._collect_logs, "errlog-reader")

    def _collect_logs(self) -> None:
        try:
            report = self.workflow.collect_all()
        except WorkflowError as e:
            self._report(e, status=str(e))
            self.emit("all_error_logs", data=f"Error: {e}", partial_failure=True)
            return
        if report.partial_failure:
            self.status_message = "Error logs read with failures."
            self.emit("error", title="Error Log Read",
                      message="One or more error log entries could not be read.")
        else:
            self.status_message = "All error logs read."
        self.emit("all_error_logs", data=report.text, partial_failure=report.partial_failure)

    def clear_error_logs(self) -> str:
        try:
            result = self.workflow.clear()
        except TransportError as e:
            self._report(e, status=str(e))
            result = f"Error: {e}"
        else:
            self.status_message = f"Error logs cleared. Response: {result}"
        self.emit("error_logs_cleared", result=result)
        return result

    # ── Error-code directory ──

    def download_database(self) -> threading.Thread:
        self.status_message = "Downloading database..."
        return self.directory.refresh_async()

    def _on_refresh_finished(self, success: bool, error: Optional[DirectoryError] = None) -> None:
        if success:
            self.status_message = "Offline database updated successfully."
        else:
            self._report(error)
        self.emit("database_download_finished", success=success)

    def lookup_offline(self, code: str) -> str:
        try:
            record = self.directory.lookup_offline(code)
        except DirectoryError as e:
            self._report(e)
            return f"Error: {e}"
        if record is None:
            self.status_message = f"Error code {code} not found in local database."
            return format_not_found(code, "local")
        self.status_message = f"Error code {code} found: {record.description}"
        return record.display()

    def lookup_online(self, code: str) -> Optional[threading.Thread]:
        """Start an online lookup; the text result arrives as ``online_result``."""
        try:
            thread = self.directory.lookup_online(code)
        except DirectoryError as e:
            self._report(e)
            self.emit("online_result", result=f"Error: {e}")
            return None
        self.status_message = f"Checking error code {code} online..."
        return thread

    def _on_lookup_finished(self, code: str, record: Optional[ErrorRecord],
                            error: Optional[DirectoryError]) -> None:
        if error is not None:
            self._report(error)
            result = f"Error: {error}"
        elif record is None:
            self.status_message = f"Error code {code} not found in online database."
            result = format_not_found(code, "online")
        else:
            self.status_message = f"Error code {record.code} found: {record.description}"
            result = record.display()
        self.emit("online_result", result=result)

    # ── Files ──

    def open_file(self, path) -> str:
        try:
            buffer = self.nor_file.load(path)
        except FileAccessError as e:
            self._report(e)
            return ""
        self.status_message = f"File opened successfully: {buffer.path}"
        self.emit("file_opened", path=str(buffer.path), hex_text=buffer.hex_text, details=buffer.details)
        return buffer.hex_text

    def save_file(self, path, hex_text: str) -> bool:
        try:
            saved = self.nor_file.save(path, hex_text)
        except FileAccessError as e:
            self._report(e)
            return False
        self.status_message = f"File saved successfully: {saved}"
        return True

    def save_modified_file(self, path, original_path, modifications: Dict[str, Any]) -> bool:
        try:
            saved = self.nor_file.save_modified(path, original_path, modifications)
        except FileAccessError as e:
            self._report(e)
            return False
        self.status_message = f"Modified file saved successfully: {saved}"
        return True


# ═══════════════════════════════════════════════════════════════════════
# SECTION 12 — CLI INTERFACE
# ═══════════════════════════════════════════════════════════════════════

def cli_status_callback(message: str) -> None:
    """Print status updates to console."""
    print(f"  {message}")

def cli_error_callback(title: str, message: str) -> None:
    """Print error notifications to console."""
    print(f"✗ {title}: {message}")

def cli_progress_callback(current: int, total: int, label: str = "") -> None:
    """Print progress to console."""
    if total > 0:
        pct = (current / total) * 100
        bar_len = 40
        filled = int(bar_len * current / total)
        bar = "█" * filled + "░" * (bar_len - filled)
        print(f"\r  {label} [{bar}] {pct:.0f}%", end="", flush=True)
        if current >= total:
            print()


SERIAL_COMMANDS = ("send", "logs", "clear-logs")


def build_backend(args: argparse.Namespace) -> NorModifierBackend:
    data_dir = Path(args.data_dir) if getattr(args, "data_dir", None) else default_data_dir()
    directory = ErrorDirectory(DirectoryConfig(url=getattr(args, "url", DIRECTORY_URL), data_dir=data_dir))

    if getattr(args, "transport", "pyserial") == "loopback":
        session = SerialSession(
            SessionConfig(baud=args.baud, response_timeout_ms=args.timeout),
            transport_factory=lambda port: LoopbackTransport(port),
            port_lister=lambda: ["LOOPBACK"],
        )
    else:
        session = SerialSession(SessionConfig(
            baud=getattr(args, "baud", DEFAULT_BAUD),
            response_timeout_ms=getattr(args, "timeout", RESPONSE_TIMEOUT_MS),
        ))
    return NorModifierBackend(session, directory)


def run_cli(args: argparse.Namespace) -> int:
    """Run the CLI interface."""
    print(f"\n{__app_name__} v{__version__}\n")

    backend = build_backend(args)
    backend.on("status", cli_status_callback)
    backend.on("error", cli_error_callback)
    backend.on("progress", cli_progress_callback)
    errors: List[str] = []
    backend.on("error", lambda title, message: errors.append(title))

    try:
        if args.command == "ports":
            ports = backend.session.list_ports()
            if ports:
                print("Available ports:")
                for p in ports:
                    print(f"  {p}")
            else:
                print("No serial ports found")
            return 0

        elif args.command == "update-db":
            finished: List[bool] = []
            backend.on("database_download_finished", lambda success: finished.append(success))
            backend.download_database().join()
            return 0 if finished and finished[0] else 1

        elif args.command == "lookup":
            if args.online:
                results: List[str] = []
                backend.on("online_result", lambda result: results.append(result))
                thread = backend.lookup_online(args.code)
                if thread is not None:
                    thread.join()
                result = results[0] if results else "Error: no result"
            else:
                result = backend.lookup_offline(args.code)
            print(f"\n{result}")
            return 1 if result.startswith("Error:") else 0

        elif args.command == "dump":
            hex_text = backend.open_file(args.input)
            if errors:
                return 1
            if args.output:
                try:
                    Path(args.output).write_text(hex_text + "\n", encoding="utf-8")
                except OSError as e:
                    print(f"✗ Could not write {args.output}: {e}")
                    return 1
                print(f"\n✓ Hex view written to {args.output}")
            else:
                print(hex_text)
            return 0

        elif args.command == "write":
            try:
                hex_text = Path(args.input).read_text(encoding="utf-8")
            except OSError as e:
                print(f"✗ Could not read {args.input}: {e}")
                return 1
            return 0 if backend.save_file(args.output, hex_text) else 1

        elif args.command in SERIAL_COMMANDS:
            if args.port:
                backend.select_port(args.port)
            else:
                backend.refresh_ports()
            if not backend.connect():
                print("✗ Connection failed")
                return 1

            if args.command == "send":
                response = backend.send_command(args.text)
                print(f"\n{response}")
                return 1 if is_error_response(response) else 0

            if args.command == "clear-logs":
                result = backend.clear_error_logs()
                print(f"\n{result}")
                return 1 if is_error_response(result) else 0

            reports: List[Tuple[str, bool]] = []
            backend.on("all_error_logs", lambda data, partial_failure: reports.append((data, partial_failure)))
            print("Reading error logs (this can take up to ~35 s)...")
            backend.read_all_error_logs().join()
            data, partial = reports[0] if reports else ("Error: no result", True)
            print(f"\n{data}")
            return 1 if partial else 0

        else:
            print(f"Unknown command: {args.command}")
            return 1

    except KeyboardInterrupt:
        print("\n\nCancelled by user")
        return 130
    except Exception as e:
        print(f"\n✗ Error: {e}")
        log.exception("CLI error")
        return 1
    finally:
        backend.session.close()


# ═══════════════════════════════════════════════════════════════════════
# SECTION 13 — ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ps5_nor_modifier",
        description=f"{__app_name__} v{__version__} — PS5 debug UART & error-code tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ports                                   # List serial ports
  %(prog)s logs --port COM3                        # Read errlog 0..10
  %(prog)s clear-logs --port COM3                  # errlog clear
  %(prog)s send --port COM3 "errlog 0"             # Send one raw command
  %(prog)s update-db                               # Download errorDB.xml
  %(prog)s lookup 80810001                         # Offline lookup
  %(prog)s lookup 80810001 --online                # Online lookup
  %(prog)s dump --input nor.bin --output nor.hex   # File -> hex view
  %(prog)s write --input nor.hex --output nor.bin  # Hex view -> file
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("ports", help="List available serial ports")

    send_p = subparsers.add_parser("send", help="Send one command to the debug UART")
    send_p.add_argument("text", help="Command text, e.g. \"errlog 0\"")

    logs_p = subparsers.add_parser("logs", help="Read all error log slots")
    clear_p = subparsers.add_parser("clear-logs", help="Clear the console error log")

    update_p = subparsers.add_parser("update-db", help="Download the offline error-code database")

    lookup_p = subparsers.add_parser("lookup", help="Look up an error code")
    lookup_p.add_argument("code", help="Error code, e.g. 80810001")
    lookup_p.add_argument("--online", action="store_true", help="Query the online service")

    dump_p = subparsers.add_parser("dump", help="Show a file as hex text")
    dump_p.add_argument("--input", "-i", required=True, help="File to read")
    dump_p.add_argument("--output", "-o", help="Write hex text here instead of stdout")

    write_p = subparsers.add_parser("write", help="Write hex text back to a binary file")
    write_p.add_argument("--input", "-i", required=True, help="Hex text file")
    write_p.add_argument("--output", "-o", required=True, help="Binary file to write")

    for sub in [send_p, logs_p, clear_p]:
        sub.add_argument("--port", "-p", help="Serial port (default: first available)")
        sub.add_argument("--baud", type=int, default=DEFAULT_BAUD, help=f"Baud rate (default: {DEFAULT_BAUD})")
        sub.add_argument("--timeout", type=int, default=RESPONSE_TIMEOUT_MS,
                         help=f"Response timeout in ms (default: {RESPONSE_TIMEOUT_MS})")
        sub.add_argument("--transport", choices=["pyserial", "loopback"], default="pyserial",
                         help="Transport type (loopback = simulated console)")

    for sub in [update_p, lookup_p]:
        sub.add_argument("--data-dir", help=f"Directory holding {DATABASE_FILENAME}")
        sub.add_argument("--url", default=DIRECTORY_URL, help=f"Directory service URL (default: {DIRECTORY_URL})")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    data_dir = getattr(args, "data_dir", None)
    setup_logging(log_dir=Path(data_dir) / "logs" if data_dir else None)
    return run_cli(args)


if __name__ == "__main__":
    sys.exit(main())
