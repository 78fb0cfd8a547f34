"""
Dispatcher <-> worker messaging over ZeroMQ.
"""
