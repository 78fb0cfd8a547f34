"""
Dispatcher: the driver side of a remote dataset.

Workers connect to the dispatcher's ROUTER socket and register. The driver
then loads partitions onto them (round-robin) and runs jobs. Every command
is answered by exactly one WorkerResponse, and a job returns only once every
worker holding a partition has answered (the barrier between iterations).

Keep this SIMPLE and READABLE.
"""

import copy
import time
from typing import Any, Dict, List, Optional

import zmq

from gd.debug import debug_print_dispatcher, verbose_print
from gd.errors import WorkerError, no_workers_error, worker_timeout_error, task_failed_error
from gd.transport.connection import create_server
from gd.transport.protocol import (
    RegisterWorker, WorkerLoadPartitions, WorkerRunJob, WorkerFreeDataset, WorkerGetStats,
    WorkerShutdown, WorkerResponse, serialize, deserialize
)


class Dispatcher:
    """
    Dispatcher coordinates workers holding dataset partitions.

    Usage:
        dispatcher = Dispatcher(port=9000)
        dispatcher.start()
        dispatcher.wait_for_workers(4)
        data = gd.parallelize(points, num_partitions=8, dispatcher=dispatcher)
        ...
        dispatcher.stop()
    """

    def __init__(self, host="localhost", port=9000, timeout: Optional[float] = None):
        self.host = host
        self.port = port
        self.timeout = timeout  # Seconds to wait for a job reply (None = forever)
        self.workers = []  # List of {"id", "identity"}
        self.worker_identities = set()  # Track ZMQ identities of workers
        self.next_worker_idx = 0  # Simple round-robin placement
        self.datasets = {}  # dataset_id -> {worker_id: [partition indices]}
        self.next_dataset_idx = 0
        self.next_seq = 1  # seq of the next broadcast
        self.running = False
        self.server_socket = None

    def start(self):
        """Bind the ROUTER socket."""
        self.server_socket = create_server(self.host, self.port)
        self.running = True
        transport = "IPC" if self.host in ('localhost', '127.0.0.1') else "TCP"
        verbose_print(f"GD: Dispatcher listening on {self.host}:{self.port} ({transport})")

    def stop(self):
        """Shut workers down and close the socket."""
        if self.running and self.workers:
            timeout, self.timeout = self.timeout, 5.0
            try:
                self._broadcast({w["id"]: WorkerShutdown() for w in self.workers})
            except WorkerError as e:
                debug_print_dispatcher(f"WARNING: shutdown incomplete: {e}")
            finally:
                self.timeout = timeout
        self.running = False
        if self.server_socket:
            self.server_socket.close()
            self.server_socket = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    # Worker registration

    def register_worker(self, worker_identity: bytes, worker_id: str):
        """Register a worker by its ZMQ identity."""
        self.workers.append({
            "id": worker_id,
            "identity": worker_identity
        })
        self.worker_identities.add(worker_identity)
        debug_print_dispatcher(f"Worker {worker_id} registered")

    def wait_for_workers(self, num_workers: int, timeout: float = 30.0):
        """Block until at least num_workers workers have registered."""
        deadline = time.time() + timeout
        while len(self.workers) < num_workers:
            remaining = deadline - time.time()
            if remaining <= 0 or not self.server_socket.poll(int(remaining * 1000)):
                raise WorkerError(worker_timeout_error(num_workers, len(self.workers), timeout))
            identity, message = self._recv()
            if not isinstance(message, RegisterWorker):
                debug_print_dispatcher(f"WARNING: Unexpected message before registration: {type(message).__name__}")
        verbose_print(f"GD: {len(self.workers)} worker(s) registered")

    def _pick_worker(self):
        """Pick a worker using round-robin."""
        if not self.workers:
            raise WorkerError(no_workers_error(0))
        worker = self.workers[self.next_worker_idx]
        self.next_worker_idx = (self.next_worker_idx + 1) % len(self.workers)
        return worker

    def _get_worker(self, worker_id):
        for worker in self.workers:
            if worker["id"] == worker_id:
                return worker
        raise WorkerError(f"Worker {worker_id} not found")

    # Messaging

    def _send_to_worker(self, worker, cmd):
        """Send a command to a worker via ROUTER socket."""
        data = serialize(cmd)
        self.server_socket.send(worker["identity"], zmq.SNDMORE)
        self.server_socket.send(b'', zmq.SNDMORE)
        self.server_socket.send(data)
        return len(data)

    def _recv(self):
        """
        Receive one message: [identity, empty, data].

        Registrations can arrive at any time and are answered inline.
        """
        identity = self.server_socket.recv()
        self.server_socket.recv()  # Empty delimiter
        message = deserialize(self.server_socket.recv())

        if isinstance(message, RegisterWorker):
            self.register_worker(identity, message.worker_id)
            self.server_socket.send(identity, zmq.SNDMORE)
            self.server_socket.send(b'', zmq.SNDMORE)
            self.server_socket.send(serialize(WorkerResponse(success=True)))
        return identity, message

    def _broadcast(self, commands: Dict[str, Any]) -> Dict[str, WorkerResponse]:
        """
        Send one command per worker id, then wait for every reply.

        Raises the first failure (in worker registration order) after all
        replies are in, so the protocol stays in sync for the next job.
        Every broadcast gets a new seq; late replies to an earlier broadcast
        (e.g. one that timed out) are dropped.
        """
        seq = self.next_seq
        self.next_seq += 1

        pending = {}
        for worker_id, cmd in commands.items():
            worker = self._get_worker(worker_id)
            cmd = copy.copy(cmd)
            cmd.seq = seq
            size = self._send_to_worker(worker, cmd)
            pending[worker["identity"]] = worker_id
            debug_print_dispatcher(f"Sent {type(cmd).__name__} to {worker_id} ({size} bytes)")

        responses = {}
        while pending:
            if self.timeout is not None and not self.server_socket.poll(int(self.timeout * 1000)):
                raise WorkerError(f"Timed out waiting for worker(s): {sorted(pending.values())}")
            identity, message = self._recv()
            if isinstance(message, RegisterWorker):
                continue
            if identity not in pending or not isinstance(message, WorkerResponse):
                debug_print_dispatcher(f"WARNING: Unexpected message: {type(message).__name__}")
                continue
            if message.seq != seq:
                debug_print_dispatcher(f"Dropping stale reply (seq {message.seq}, expected {seq})")
                continue
            responses[pending.pop(identity)] = message

        for worker in self.workers:
            response = responses.get(worker["id"])
            if response is not None and not response.success:
                if response.exception is not None:
                    raise response.exception
                raise WorkerError(task_failed_error(worker["id"], response.error))
        return responses

    # Datasets

    def load_partitions(self, partitions: List[list]) -> str:
        """Place partitions on workers round-robin. Returns the new dataset id."""
        if not self.workers:
            raise WorkerError(no_workers_error(0))

        dataset_id = f"dataset_{self.next_dataset_idx}"
        self.next_dataset_idx += 1

        placement = {}
        for index, records in enumerate(partitions):
            worker = self._pick_worker()
            placement.setdefault(worker["id"], {})[index] = records

        self._broadcast({worker_id: WorkerLoadPartitions(dataset_id=dataset_id, partitions=parts)
                         for worker_id, parts in placement.items()})
        self.datasets[dataset_id] = {worker_id: sorted(parts) for worker_id, parts in placement.items()}
        debug_print_dispatcher(f"Loaded {dataset_id}: {len(partitions)} partition(s) on {len(placement)} worker(s)")
        return dataset_id

    def run_job(self, dataset_id: str, stages, action) -> Dict[int, Any]:
        """Run action on every partition of a dataset. Returns {partition_index: result}."""
        placement = self.datasets[dataset_id]
        cmd = WorkerRunJob(dataset_id=dataset_id, stages=tuple(stages), action=action)
        responses = self._broadcast({worker_id: cmd for worker_id in placement})

        results = {}
        for response in responses.values():
            results.update(response.data)
        return results

    def free_dataset(self, dataset_id: str):
        """Drop a dataset from its workers."""
        placement = self.datasets.pop(dataset_id, {})
        self._broadcast({worker_id: WorkerFreeDataset(dataset_id=dataset_id) for worker_id in placement})

    def get_worker_stats(self) -> Dict[str, dict]:
        """Statistics from every worker."""
        responses = self._broadcast({w["id"]: WorkerGetStats() for w in self.workers})
        return {worker_id: response.data for worker_id, response in responses.items()}
