"""
GD Worker CLI.

Usage:
    python -m gd.worker --host localhost -p 12345
"""

import argparse
import os
import socket

from gd.worker.worker import Worker


def main(argv=None):
    parser = argparse.ArgumentParser(description='GD Worker')
    parser.add_argument('--host', type=str, default='localhost',
                        help='Dispatcher host (default: localhost)')
    parser.add_argument('-p', '--port', type=int, required=True,
                        help='Dispatcher port')
    parser.add_argument('--id', type=str, default=None,
                        help='Worker ID (default: auto-generated)')
    args = parser.parse_args(argv)

    worker_id = args.id or f"worker_{socket.gethostname()}_{os.getpid()}"

    print(f"Starting GD worker: {worker_id}")
    print(f"Connecting to dispatcher at {args.host}:{args.port}")

    worker = Worker(worker_id=worker_id)

    try:
        worker.connect_to_dispatcher(
            dispatcher_host=args.host,
            dispatcher_port=args.port
        )
    except KeyboardInterrupt:
        print("\nWorker stopped")


if __name__ == '__main__':
    main()
