
"""
Two-player link.

Every message is a single byte: the top three bits carry the message kind,
the low five bits an unsigned value (0..31). There is no acknowledgement or
retransmission; a socket error other than "would block" ends the link.
"""
import logging
import socket
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

from tetris_board import Board
from tetris_config import CONFIG

log = logging.getLogger(__name__)

KIND_MASK = 0xE0
VALUE_MASK = 0x1F
MIN_PORT, MAX_PORT = 1025, 65535
RECV_SIZE = 64


class MsgKind(IntEnum):
    HEIGHT = 0x00   # sender's stack height
    LINES = 0x20    # penalty rows for the receiver
    LOST = 0x40     # sender topped out
    QUIT = 0x60     # sender is leaving
    PAUSE = 0x80    # toggle pause on the receiver


class Role(Enum):
    NONE = "none"
    SERVER = "server"
    CLIENT = "client"


class NetError(Exception):
    """The link is unusable (peer gone or socket failure)."""


class ProtocolError(ValueError):
    """A byte that does not carry a known message kind."""


def encode(kind: MsgKind, value: int = 0) -> bytes:
    if not 0 <= value <= VALUE_MASK:
        raise ValueError(f"message value {value} does not fit in 5 bits")
    return bytes([int(kind) | value])


def decode(byte: int) -> Tuple[MsgKind, int]:
    try:
        kind = MsgKind(byte & KIND_MASK)
    except ValueError:
        raise ProtocolError(f"unknown message kind 0x{byte & KIND_MASK:02x}") from None
    return kind, byte & VALUE_MASK


def measure_height(board: Board) -> int:
    """Row index of the topmost occupied row; 0 for an empty board."""
    top = board.top_row()
    return 0 if top is None else top


def read_port(text: str) -> int:
    try:
        port = int(text)
    except (TypeError, ValueError):
        port = 0
    if not port:
        return CONFIG["NET_PORT"]
    return min(max(port, MIN_PORT), MAX_PORT)


def parse_address(text: str) -> Tuple[Optional[str], int]:
    """'host:port' for a client, ':port' for a server (host is None)."""
    host, sep, port = text.rpartition(":")
    if not sep:
        return text or None, CONFIG["NET_PORT"]
    return host or None, read_port(port)


class NetLink:
    def __init__(self, sock: socket.socket, role: Role = Role.CLIENT,
                 listener: Optional[socket.socket] = None):
        self.sock = sock
        self.role = role
        self.listener = listener
        self.height = 0
        self.pending_lines = 0
        self.closed = False
        self.sock.setblocking(False)

    @classmethod
    def serve(cls, port: int, host: str = "") -> "NetLink":
        """Listen on `port` and block until exactly one peer connects."""
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((host, port))
            listener.listen(1)
            log.info("Waiting for connection on port %d", port)
            sock, addr = listener.accept()
        except OSError as exc:
            listener.close()
            raise NetError(f"cannot serve on port {port}: {exc}") from exc
        except KeyboardInterrupt:
            listener.close()
            raise
        log.info("A client has connected from %s:%d", *addr[:2])
        return cls(sock, Role.SERVER, listener)

    @classmethod
    def connect(cls, host: str, port: int) -> "NetLink":
        log.info("Connecting to %s:%d", host, port)
        try:
            sock = socket.create_connection((host, port))
        except OSError as exc:
            raise NetError(f"cannot connect to {host}:{port}: {exc}") from exc
        log.info("Connected to the server")
        return cls(sock, Role.CLIENT)

    def send(self, kind: MsgKind, value: int = 0):
        if self.closed:
            return
        try:
            self.sock.send(encode(kind, value))
        except BlockingIOError:
            log.debug("send buffer full, dropped %s", kind.name)
        except OSError as exc:
            raise NetError(f"send failed: {exc}") from exc

    def poll(self) -> List[Tuple[MsgKind, int]]:
        """Decode whatever is readable right now; never blocks."""
        if self.closed:
            return []
        try:
            data = self.sock.recv(RECV_SIZE)
        except BlockingIOError:
            return []
        except OSError as exc:
            raise NetError(f"read failed: {exc}") from exc
        if not data:
            raise NetError("peer closed the connection")

        messages = []
        for byte in data:
            try:
                messages.append(decode(byte))
            except ProtocolError as exc:
                log.warning("Ignoring byte 0x%02x: %s", byte, exc)
        return messages

    def queue_lines(self, count: int):
        self.pending_lines += count

    def take_pending_lines(self) -> int:
        n, self.pending_lines = self.pending_lines, 0
        return n

    def report_height(self, board: Board) -> bool:
        """Send HEIGHT when the stack height changed since the last report."""
        height = measure_height(board)
        if height == self.height:
            return False
        self.height = height
        self.send(MsgKind.HEIGHT, height)
        return True

    def close(self):
        if self.closed:
            return
        self.closed = True
        for s in (self.sock, self.listener):
            if s is not None:
                try:
                    s.close()
                except OSError as exc:
                    log.debug("close failed: %s", exc)
        log.info("Network link closed")
