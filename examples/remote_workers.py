"""
Run sequential descent on partitions held by worker processes.

Start a dispatcher here, then workers in other terminals:
    python examples/remote_workers.py            # waits for 2 workers
    python -m gd worker --host localhost -p 9500
    python -m gd worker --host localhost -p 9500
"""

import numpy as np

import gd
from gd.dispatcher import Dispatcher

rng = np.random.default_rng(11)
features = rng.standard_normal((1000, 2))
labels = (features @ np.array([1.0, -1.0]) > 0).astype(np.float64)
points = [gd.LabeledPoint(float(y), x) for y, x in zip(labels, features)]

with Dispatcher(host='localhost', port=9500) as dispatcher:
    print("Waiting for 2 workers on port 9500...")
    dispatcher.wait_for_workers(2, timeout=120.0)

    data = gd.parallelize(points, num_partitions=4, dispatcher=dispatcher)
    opt = (gd.GradientDescent(gd.LogisticGradient(), gd.LazySquaredL2Updater())
           .set_step_size(1.0)
           .set_num_iterations(5)
           .set_reg_param(0.01)
           .set_mini_batch_fraction(0.0))
    weights, history = opt.optimize_with_history(data, np.zeros(2))

    accuracy = np.mean([(np.dot(p.features, weights) > 0) == (p.label > 0) for p in points])
    print(f"weights: {np.round(weights, 3)}  accuracy: {accuracy:.3f}")
    print(f"worker stats: {dispatcher.get_worker_stats()}")
