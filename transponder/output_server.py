"""
TCP server that streams indicator state as JSON lines to presentation clients.

Each line is one compact JSON object (see IndicatorState.to_dict()). A client
that connects between frames is sent the most recent frame right away.
"""

import json
import logging
import math
import socket
import threading
from typing import List, Optional

logger = logging.getLogger(__name__)


def encode_state(state: dict) -> bytes:
    """One JSON line; non-finite floats become null so the output stays valid JSON."""
    clean = {
        k: (None if isinstance(v, float) and not math.isfinite(v) else v)
        for k, v in state.items()
    }
    return (json.dumps(clean, separators=(",", ":")) + "\n").encode("utf-8")


class IndicatorServer:
    """
    Non-blocking listener plus a list of connected indicator clients.

    accept_new() is driven from the main loop when select() reports the
    listening socket readable; send_state() may be called from any thread.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 2950) -> None:
        self._host = host
        self._port = port
        self._sock: Optional[socket.socket] = None
        self._clients: List[socket.socket] = []
        self._last_frame: Optional[bytes] = None
        self._lock = threading.Lock()

    def start(self) -> bool:
        """Bind and listen; return True on success."""
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((self._host, self._port))
            self._sock.listen(4)
            self._sock.setblocking(False)
        except OSError as e:
            logger.error("Indicator server bind failed: %s", e)
            return False
        logger.info("Indicator server listening on %s:%s", self._host, self._port)
        return True

    def stop(self) -> None:
        """Close the listener and every client connection."""
        with self._lock:
            for c in self._clients:
                self._close(c)
            self._clients.clear()
            self._last_frame = None
        if self._sock:
            self._close(self._sock)
            self._sock = None

    def accept_new(self) -> None:
        """Accept every pending connection and greet it with the latest frame."""
        if not self._sock:
            return
        while True:
            try:
                client, addr = self._sock.accept()
            except BlockingIOError:
                return
            except OSError as e:
                logger.debug("accept error: %s", e)
                return
            with self._lock:
                if self._last_frame is not None and not self._send(
                    client, self._last_frame
                ):
                    self._close(client)
                    continue
                self._clients.append(client)
                total = len(self._clients)
            logger.info("Indicator client %s connected (total %d)", addr, total)

    def send_state(self, state: dict) -> None:
        """Send one state dict to all clients, dropping any that fail."""
        frame = encode_state(state)
        with self._lock:
            self._last_frame = frame
            alive = [c for c in self._clients if self._send(c, frame)]
            dropped = len(self._clients) - len(alive)
            self._clients = alive
        if dropped:
            logger.info("Dropped %d indicator client(s)", dropped)

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._clients)

    def get_socket(self) -> Optional[socket.socket]:
        """Return the listening socket for select()."""
        return self._sock

    @staticmethod
    def _send(client: socket.socket, frame: bytes) -> bool:
        try:
            client.sendall(frame)
            return True
        except OSError:
            IndicatorServer._close(client)
            return False

    @staticmethod
    def _close(sock: socket.socket) -> None:
        try:
            sock.close()
        except OSError:
            pass
