"""Detection of, and messaging with, another running instance of an application.

The first instance takes a write lock on a lock file in the temporary
directory and listens on a local socket next to it. Later instances find
the lock taken and send their message over the socket instead. A message
travels as a big-endian 32-bit length followed by its UTF-8 bytes; the
receiver answers with ``ack``.
"""

from __future__ import annotations

import errno
import logging
import os
import re
import select
import socket
import struct
import sys
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from .lockedfile import LockedFile, LockMode

_log = logging.getLogger(__name__)

ACK = b"ack"
SOCKET_PREFIX = "qtsingleapp-"
_HEADER = struct.Struct(">I")
_CONNECT_RETRY_DELAY = 0.25
_HEADER_WAIT = 30.0
_BODY_WAIT = 2.0
_DISCONNECT_WAIT = 1.0


def qchecksum(data: bytes | str) -> int:
    """Return the ISO 3309 (CRC-16/X-25) checksum of the data."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    crc = 0xFFFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            crc = (crc >> 1) ^ 0x8408 if crc & 1 else crc >> 1
    return ~crc & 0xFFFF


def _application_file_path() -> str:
    path = os.path.abspath(sys.argv[0] if sys.argv and sys.argv[0] else sys.executable)
    path = path.replace(os.sep, "/")
    if os.name == "nt":
        path = path.lower()
    return path


def make_socket_name(app_id: str) -> str:
    """Build the local socket name used by instances sharing ``app_id``.

    An empty identifier stands for the path of the running program.
    """
    identifier = app_id
    prefix = app_id
    if not identifier:
        identifier = _application_file_path()
        prefix = identifier.rsplit("/", 1)[-1]
    prefix = re.sub("[^a-zA-Z]", "", prefix)[:6]
    name = f"{SOCKET_PREFIX}{prefix}-{qchecksum(identifier):x}"
    getuid = getattr(os, "getuid", None)
    if getuid is not None:
        name += f"-{getuid():x}"
    return name


def _recv_exact(sock: socket.socket, size: int, timeout: float) -> bytes:
    """Read up to ``size`` bytes, giving up when ``timeout`` passes without data."""
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        sock.settimeout(timeout)
        try:
            chunk = sock.recv(remaining)
        except socket.timeout:
            break
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class LocalPeer:
    """One instance's end of the single-instance protocol."""

    def __init__(
        self,
        app_id: str = "",
        directory: str | os.PathLike[str] | None = None,
    ) -> None:
        self._id = app_id or _application_file_path()
        self.socket_name = make_socket_name(app_id)
        self.directory = Path(directory if directory is not None else tempfile.gettempdir()).absolute()
        self.socket_path = str(self.directory / self.socket_name)
        self.lock_path = str(self.directory / f"{self.socket_name}-lockfile")
        self._server: socket.socket | None = None
        self._listeners: list[Callable[[str], object]] = []
        self._lock_file = LockedFile(self.lock_path)
        self._lock_file.open("r+")

    def __enter__(self) -> LocalPeer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def application_id(self) -> str:
        return self._id

    def add_listener(self, callback: Callable[[str], object]) -> None:
        """Call ``callback`` with every message received from another instance."""
        self._listeners.append(callback)

    def is_client(self) -> bool:
        """Return True if another instance already runs.

        Otherwise this peer becomes the running instance and starts listening.
        """
        if self._lock_file.is_locked():
            return False
        if not self._lock_file.lock(LockMode.WRITE_LOCK, False):
            return True
        try:
            self._server = self._listen()
        except OSError as exc:
            _log.warning("listen on local socket failed, %s", exc)
        return False

    def _listen(self) -> socket.socket:
        server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            try:
                server.bind(self.socket_path)
            except OSError as exc:
                if exc.errno != errno.EADDRINUSE:
                    raise
                os.remove(self.socket_path)
                server.bind(self.socket_path)
            server.listen()
            server.setblocking(False)
        except BaseException:
            server.close()
            raise
        return server

    def send_message(self, message: str, timeout: int = 5000) -> bool:
        """Send ``message`` to the running instance, waiting ``timeout`` ms.

        Returns True once the running instance acknowledged it.
        """
        if not self.is_client():
            return False
        timeout_s = timeout / 1000
        sock: socket.socket | None = None
        for attempt in range(2):
            candidate = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            candidate.settimeout(timeout_s / 2)
            try:
                candidate.connect(self.socket_path)
            except OSError:
                candidate.close()
            else:
                sock = candidate
                break
            if attempt == 0:
                time.sleep(_CONNECT_RETRY_DELAY)
        if sock is None:
            return False
        payload = message.encode("utf-8")
        with sock:
            try:
                sock.settimeout(timeout_s)
                sock.sendall(_HEADER.pack(len(payload)) + payload)
                reply = _recv_exact(sock, len(ACK), timeout_s)
            except OSError:
                return False
        return reply == ACK

    def receive_connection(self) -> str | None:
        """Serve one pending connection, if any, and return its message.

        Listeners are called with the message before it is returned.
        """
        if self._server is None:
            return None
        ready, _, _ = select.select([self._server], [], [], 0)
        if not ready:
            return None
        try:
            conn, _ = self._server.accept()
        except (BlockingIOError, InterruptedError):
            return None
        with conn:
            conn.setblocking(True)
            try:
                header = _recv_exact(conn, _HEADER.size, _HEADER_WAIT)
                if len(header) < _HEADER.size:
                    _log.warning("peer disconnected")
                    return None
                (length,) = _HEADER.unpack(header)
                body = _recv_exact(conn, length, _BODY_WAIT).ljust(length, b"\0")
            except OSError as exc:
                _log.warning("message reception failed %s", exc)
                return None
            message = body.decode("utf-8", errors="replace")
            try:
                conn.sendall(ACK)
                conn.settimeout(_DISCONNECT_WAIT)
                conn.recv(1)
            except OSError:
                pass
        for callback in list(self._listeners):
            callback(message)
        return message

    def close(self) -> None:
        """Stop listening, remove the socket and release the lock file."""
        if self._server is not None:
            self._server.close()
            self._server = None
            try:
                os.remove(self.socket_path)
            except FileNotFoundError:
                pass
        self._lock_file.close()