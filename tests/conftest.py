"""
Pytest configuration and fixtures.

Keep this SIMPLE and READABLE.
"""

import pytest
import threading
import numpy as np

from gd.types import LabeledPoint
from gd.dispatcher.dispatcher import Dispatcher
from gd.worker.worker import Worker


def start_cluster(port, num_workers):
    """Start a dispatcher plus worker threads on a test port."""
    dispatcher = Dispatcher(host='localhost', port=port, timeout=30.0)
    dispatcher.start()

    for i in range(num_workers):
        def make_run_worker(worker_id):
            def run_worker():
                worker = Worker(worker_id=worker_id)
                worker.connect_to_dispatcher(dispatcher_host='localhost', dispatcher_port=port)
            return run_worker

        thread = threading.Thread(target=make_run_worker(f"test_worker_{i}"), daemon=True)
        thread.start()

    dispatcher.wait_for_workers(num_workers, timeout=10.0)
    return dispatcher


@pytest.fixture(scope="module")
def cluster():
    """
    Dispatcher with 2 workers for remote dataset tests.

    Runs once per test module and shuts the workers down afterwards.
    """
    print("\n=== Starting GD cluster for testing ===")
    dispatcher = start_cluster(9611, 2)

    yield dispatcher  # Tests run here

    print("\n=== Shutting down GD cluster ===")
    dispatcher.stop()


@pytest.fixture
def toy_points():
    """Four 1-D examples: labels {0, 0, 1, 1}, features {0, 0, 1, 1}."""
    return [LabeledPoint.of(0.0, [0.0]), LabeledPoint.of(0.0, [0.0]),
            LabeledPoint.of(1.0, [1.0]), LabeledPoint.of(1.0, [1.0])]


@pytest.fixture
def regression_points():
    """200 noise-free examples of y = 2*x0 - x1 + 0.5*x2."""
    rng = np.random.default_rng(0)
    features = rng.standard_normal((200, 3))
    labels = features @ np.array([2.0, -1.0, 0.5])
    return [LabeledPoint(float(y), x) for y, x in zip(labels, features)]


@pytest.fixture
def classification_points():
    """200 linearly separable examples, label 1 when x0 + x1 > 0."""
    rng = np.random.default_rng(1)
    features = rng.standard_normal((200, 2))
    labels = (features.sum(axis=1) > 0).astype(np.float64)
    return [LabeledPoint(float(y), x) for y, x in zip(labels, features)]


@pytest.fixture
def single_worker_cluster():
    """Dispatcher with 1 worker, for tests that change the dispatcher timeout."""
    dispatcher = start_cluster(9613, 1)
    yield dispatcher
    dispatcher.stop()
