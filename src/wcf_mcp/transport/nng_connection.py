"""NNG connection to the automation service's command port.

The service listens on an NNG ``pair1`` socket (``tcp://host:10086`` by
default). Each call writes one serialized ``Request`` and reads back one
serialized ``Response``; there is never more than one request in flight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..protocol.codec import decode_response, encode_request
from ..protocol.messages import Request, Response

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 10086
SEND_TIMEOUT_MS = 5000
RECV_TIMEOUT_MS = 5000


@dataclass
class EndpointInfo:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @property
    def address(self) -> str:
        return f"tcp://{self.host}:{self.port}"


class NNGConnection:
    """Manages the NNG socket to the command port.

    Usage::

        conn = NNGConnection()
        conn.open()
        response = conn.call(request)
        conn.close()
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        send_timeout_ms: int = SEND_TIMEOUT_MS,
        recv_timeout_ms: int = RECV_TIMEOUT_MS,
    ) -> None:
        self._endpoint = EndpointInfo(host=host, port=port)
        self._send_timeout_ms = send_timeout_ms
        self._recv_timeout_ms = recv_timeout_ms
        self._socket = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def endpoint(self) -> EndpointInfo:
        return self._endpoint

    def open(self) -> EndpointInfo:
        """Dial the command port.

        Raises:
            ConnectionError: If the service cannot be reached.
        """
        import pynng

        address = self._endpoint.address
        sock = pynng.Pair1(
            send_timeout=self._send_timeout_ms,
            recv_timeout=self._recv_timeout_ms,
        )
        try:
            sock.dial(address, block=True)
        except pynng.NNGException as e:
            sock.close()
            raise ConnectionError(
                f"Could not connect to {address}. "
                f"Ensure the service is running. Last error: {e}"
            ) from e

        self._socket = sock
        self._connected = True
        logger.info("Connected to %s", address)
        return self._endpoint

    def close(self) -> None:
        """Close the socket."""
        if not self._connected:
            return

        try:
            self._socket.close()
        except Exception as e:
            logger.warning("Error closing socket: %s", e)
        finally:
            self._socket = None
            self._connected = False
            logger.info("Disconnected")

    def send(self, data: bytes) -> None:
        if not self._connected:
            raise ConnectionError("Not connected to service")
        self._socket.send(data)

    def recv(self) -> bytes:
        if not self._connected:
            raise ConnectionError("Not connected to service")
        return self._socket.recv()

    def call(self, request: Request) -> Response:
        """Send a request and decode the reply.

        Raises:
            ConnectionError: If not connected.
            pynng.NNGException: On timeouts or socket failure.
        """
        self.send(encode_request(request))
        return decode_response(self.recv())
