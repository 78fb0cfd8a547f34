"""
GD - Distributed Gradient Descent

Fits a weight vector by gradient descent over a partitioned dataset, with two
execution strategies: synchronous mini-batch SGD and per-partition sequential
descent with lazy regularization.

Simple API:
    import gd

    data = gd.parallelize(points, num_partitions=4)   # (label, features) pairs

    opt = (gd.GradientDescent(gd.LeastSquaresGradient(), gd.SquaredL2Updater())
           .set_step_size(0.1)
           .set_num_iterations(50)
           .set_reg_param(0.01))
    weights = opt.optimize(data, initial_weights)

    # Loss trajectory
    weights, losses = gd.run_mini_batch_sgd(data, gradient, updater, 0.1, 50, 0.01, 1.0, w0)
"""

__version__ = "0.1.0"

from gd.types import LabeledPoint
from gd.errors import InvalidArgumentError, WorkerError
from gd.engine import create_engine
from gd.dataset import Dataset, LocalDataset, RemoteDataset, parallelize, load_labeled_points
from gd.optimization import (
    Gradient, LeastSquaresGradient, LogisticGradient, HingeGradient,
    Updater, SimpleUpdater, L1Updater, SquaredL2Updater,
    LazyUpdater, LazyL1Updater, LazySquaredL2Updater,
    GradientDescent, run_mini_batch_sgd, run_gradient_descent,
    create_gradient, create_updater,
)
from gd.config import Config, OptimizerConfig, ClusterConfig, get_config, load_config
