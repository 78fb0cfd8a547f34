"""
Fit a linear model with both execution strategies.

Mini-batch SGD samples a fraction of every partition per iteration;
per-partition sequential descent scans each partition and averages.

Usage:
    python examples/linear_regression.py
    GD_VERBOSE=1 python examples/linear_regression.py
"""

import numpy as np

import gd

rng = np.random.default_rng(7)
true_weights = np.array([1.5, -2.0, 0.25, 0.0])
features = rng.standard_normal((2000, 4))
labels = features @ true_weights + 0.01 * rng.standard_normal(2000)
points = [gd.LabeledPoint(float(y), x) for y, x in zip(labels, features)]

data = gd.parallelize(points, num_partitions=4)

print("=" * 60)
print("Mini-batch SGD (10% of the data per iteration)")
print("=" * 60)

opt = (gd.GradientDescent(gd.LeastSquaresGradient(), gd.SquaredL2Updater())
       .set_step_size(0.2)
       .set_num_iterations(100)
       .set_reg_param(0.001)
       .set_mini_batch_fraction(0.1))
weights, history = opt.optimize_with_history(data, np.zeros(4))
print(f"weights: {np.round(weights, 3)}")
print(f"first/last loss: {history[0]:.4f} / {history[-1]:.4f}")

print("\n" + "=" * 60)
print("Per-partition sequential descent (lazy L1)")
print("=" * 60)

opt = (gd.GradientDescent(gd.LeastSquaresGradient(), gd.LazyL1Updater())
       .set_step_size(0.05)
       .set_num_iterations(10)
       .set_reg_param(0.0001)
       .set_mini_batch_fraction(0.0))
weights, history = opt.optimize_with_history(data, np.zeros(4))
print(f"weights: {np.round(weights, 3)}")
print(f"first/last loss: {history[0]:.4f} / {history[-1]:.4f}")

print(f"\ntrue weights: {true_weights}")
