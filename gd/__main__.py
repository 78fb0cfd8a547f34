"""
GD command-line interface.

Usage:
    python -m gd train data.csv [options]
    python -m gd worker --host localhost -p 12345
"""

import sys


def main():
    if len(sys.argv) < 2:
        print("Usage:")
        print("  python -m gd train <data.csv> [options]")
        print("  python -m gd worker --host <host> -p <port>")
        sys.exit(1)

    command = sys.argv[1]
    if command == 'train':
        from gd.train import main as train_main
        sys.exit(train_main(sys.argv[2:]))
    elif command == 'worker':
        from gd.worker.__main__ import main as worker_main
        worker_main(sys.argv[2:])
    else:
        print(f"Unknown command: {command}")
        print("Available commands: train, worker")
        sys.exit(1)


if __name__ == '__main__':
    main()
