"""
ZMQ-based connection helpers.

- localhost connections use ipc:// (Unix domain sockets)
- Remote connections use tcp://

Keep this SIMPLE and READABLE.
"""

import zmq
from .protocol import serialize, deserialize


LOCAL_HOSTS = ('localhost', '127.0.0.1')


def endpoint(host, port):
    """ZMQ endpoint for a dispatcher address."""
    if host in LOCAL_HOSTS:
        return f"ipc:///tmp/gd_dispatcher_{port}.ipc"
    return f"tcp://{host}:{port}"


def _tune(socket):
    socket.setsockopt(zmq.SNDHWM, 10000)     # High water mark for send queue
    socket.setsockopt(zmq.RCVHWM, 10000)     # High water mark for receive queue
    socket.setsockopt(zmq.LINGER, 0)         # Don't wait for unsent messages on close
    socket.setsockopt(zmq.SNDBUF, 1048576)   # 1MB send buffer
    socket.setsockopt(zmq.RCVBUF, 1048576)   # 1MB receive buffer


class Connection:
    """ZMQ DEALER connection wrapper for worker -> dispatcher communication."""

    def __init__(self, socket):
        self.socket = socket
        _tune(self.socket)

    def send(self, obj):
        """Send an object over the connection.

        DEALER sockets send: [empty, data]
        """
        data = serialize(obj)
        self.socket.send(b'', zmq.SNDMORE)
        self.socket.send(data)

    def recv(self):
        """Receive an object from the connection.

        DEALER sockets receive: [empty, data]
        """
        self.socket.recv()  # Empty delimiter
        data = self.socket.recv()
        return deserialize(data)

    def close(self):
        """Close the connection."""
        self.socket.close()


def create_server(host, port):
    """Create a ZMQ ROUTER server socket."""
    context = zmq.Context.instance()
    socket = context.socket(zmq.ROUTER)
    _tune(socket)
    socket.setsockopt(zmq.ROUTER_MANDATORY, 1)  # Fail loudly on unknown worker identities
    socket.bind(endpoint(host, port))
    return socket


def connect(host, port):
    """Connect to a ZMQ ROUTER server using a DEALER socket."""
    context = zmq.Context.instance()
    socket = context.socket(zmq.DEALER)
    socket.connect(endpoint(host, port))
    return Connection(socket)
