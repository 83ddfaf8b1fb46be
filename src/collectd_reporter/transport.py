"""UDP transport to a collectd network plugin."""

from __future__ import annotations

import logging
import socket

logger = logging.getLogger(__name__)

DEFAULT_PORT = 25826


class Sender:
    """Owns a connected UDP socket to the collectd server.

    The socket is created lazily by :meth:`connect`; constructing a sender
    performs no network I/O.
    """

    def __init__(self, host: str | None, port: int = DEFAULT_PORT) -> None:
        self._host = host
        self._port = port
        self._sock: socket.socket | None = None

    @property
    def address(self) -> tuple[str | None, int]:
        return self._host, self._port

    def is_connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        """Open the socket.  Raises :class:`OSError` on failure."""
        if self._sock is not None:
            return
        if not self._host:
            raise ConnectionError("collectd host is not configured")

        family, socktype, proto, _, addr = socket.getaddrinfo(
            self._host, self._port, 0, socket.SOCK_DGRAM,
        )[0]
        sock = socket.socket(family, socktype, proto)
        try:
            sock.connect(addr)
        except OSError:
            sock.close()
            raise
        self._sock = sock
        logger.debug("Connected to collectd at %s:%d", self._host, self._port)

    def send(self, data: bytes) -> None:
        if self._sock is None:
            raise ConnectionError("not connected to collectd")
        self._sock.send(data)

    def disconnect(self) -> None:
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        sock.close()
        logger.debug("Disconnected from collectd at %s:%d", self._host, self._port)
