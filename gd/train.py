"""
GD training CLI.

Usage:
    python -m gd train data.csv --iterations 50 --step-size 0.5
    python -m gd train data.csv --config config.yaml
    python -m gd train data.csv --port 9500 --spawn-workers 4 --partitions 8
    python -m gd train data.csv --port 9500 --workers 4   # external workers

The CSV holds one example per row: label first, then the features.
"""

import argparse
import threading
from typing import List, Optional, Tuple

import numpy as np
from rich.console import Console
from rich.table import Table
from rich import box

from gd.config import Config, OptimizerConfig, ClusterConfig
from gd.dataset import parallelize, load_labeled_points
from gd.debug import verbose_print
from gd.optimization import GradientDescent, GRADIENTS, UPDATERS


def spawn_workers(num_workers: int, host: str, port: int) -> List[threading.Thread]:
    """Start workers in background threads of this process."""
    from gd.worker.worker import Worker

    threads = []
    for i in range(num_workers):
        def make_run_worker(worker_id):
            def run_worker():
                Worker(worker_id=worker_id).connect_to_dispatcher(dispatcher_host=host, dispatcher_port=port)
            return run_worker

        thread = threading.Thread(target=make_run_worker(f"spawned_worker_{i}"), daemon=True)
        thread.start()
        threads.append(thread)
        verbose_print(f"GD: Spawned worker {i + 1}/{num_workers}")
    return threads


def train(points, optimizer: OptimizerConfig, cluster: ClusterConfig,
          spawn: int = 0) -> Tuple[np.ndarray, List[float]]:
    """Fit weights to labeled points, in-process or on a cluster."""
    num_features = len(points[0].features) if points else 0
    opt = GradientDescent.from_config(optimizer)

    if cluster.port is None:
        data = parallelize(points, cluster.num_partitions)
        return opt.optimize_with_history(data, np.zeros(num_features))

    from gd.dispatcher import Dispatcher

    dispatcher = Dispatcher(host=cluster.host, port=cluster.port)
    dispatcher.start()
    try:
        if spawn:
            spawn_workers(spawn, cluster.host, cluster.port)
        dispatcher.wait_for_workers(max(cluster.num_workers, spawn, 1))
        data = parallelize(points, cluster.num_partitions, dispatcher=dispatcher)
        return opt.optimize_with_history(data, np.zeros(num_features))
    finally:
        dispatcher.stop()


def render(weights: np.ndarray, history: List[float], console: Optional[Console] = None):
    """Print final weights and the loss history."""
    console = console or Console()

    table = Table(title="Loss history", box=box.SIMPLE)
    table.add_column("Iteration", justify="right")
    table.add_column("Loss", justify="right")
    for i, loss in enumerate(history, start=1):
        table.add_row(str(i), f"{loss:.6g}")
    console.print(table)

    console.print("Weights: [" + ", ".join(f"{w:.6g}" for w in weights) + "]")


def main(argv=None):
    parser = argparse.ArgumentParser(description='GD Train')
    parser.add_argument('data', type=str, help='CSV file: label, features...')
    parser.add_argument('--config', type=str, default=None,
                        help='YAML config (default: GD_CONFIG env var)')
    parser.add_argument('--delimiter', type=str, default=',')
    parser.add_argument('--skip-header', type=int, default=0)
    parser.add_argument('--iterations', type=int, default=None)
    parser.add_argument('--step-size', type=float, default=None)
    parser.add_argument('--reg-param', type=float, default=None)
    parser.add_argument('--fraction', type=float, default=None,
                        help='Mini-batch fraction (<= 0 runs per-partition sequential descent)')
    parser.add_argument('--gradient', type=str, default=None, choices=sorted(GRADIENTS))
    parser.add_argument('--updater', type=str, default=None, choices=sorted(UPDATERS))
    parser.add_argument('--backend', type=str, default=None, choices=['numpy', 'pytorch'])
    parser.add_argument('--partitions', type=int, default=None)
    parser.add_argument('-H', '--host', type=str, default=None, help='Dispatcher bind host')
    parser.add_argument('-p', '--port', type=int, default=None,
                        help='Dispatcher port (default: run in-process)')
    parser.add_argument('--workers', type=int, default=None, help='Workers to wait for')
    parser.add_argument('--spawn-workers', type=int, default=0,
                        help='Workers to start in this process (requires --port)')
    args = parser.parse_args(argv)

    config = Config()
    if args.config:
        config.load(args.config)
    else:
        config.load_from_env()

    overrides = {
        'num_iterations': args.iterations,
        'step_size': args.step_size,
        'reg_param': args.reg_param,
        'mini_batch_fraction': args.fraction,
        'gradient': args.gradient,
        'updater': args.updater,
        'backend': args.backend,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config.optimizer, key, value)

    for key, value in (('host', args.host), ('port', args.port),
                       ('num_workers', args.workers), ('num_partitions', args.partitions)):
        if value is not None:
            setattr(config.cluster, key, value)

    if args.spawn_workers and config.cluster.port is None:
        parser.error("--spawn-workers requires --port")

    points = load_labeled_points(args.data, delimiter=args.delimiter, skip_header=args.skip_header)
    weights, history = train(points, config.optimizer, config.cluster, spawn=args.spawn_workers)
    render(weights, history)
    return 0


if __name__ == '__main__':
    main()
