"""
Worker holds dataset partitions and runs per-partition tasks for the dispatcher.

Workers are simple command processors - they execute what the dispatcher
tells them and answer every command with one WorkerResponse.

Keep this SIMPLE and READABLE.
"""

from gd.debug import debug_print_worker
from gd.dataset.stages import run_partition
from gd.transport.connection import connect
from gd.transport.protocol import (
    WorkerCommand, RegisterWorker, WorkerLoadPartitions, WorkerRunJob, WorkerFreeDataset,
    WorkerGetStats, WorkerShutdown, WorkerResponse, failure_response
)


class Worker:
    """
    Worker storing partitions in memory.

    Partitions are grouped per dataset: {dataset_id: {partition_index: records}}.
    """

    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        self.datasets = {}
        self.running = False
        self.conn = None

        # Statistics tracking
        self.stats = {
            'jobs': 0,
            'tasks': 0,
            'failed_jobs': 0,
            'partitions': 0,
            'records': 0,
        }

    def connect_to_dispatcher(self, dispatcher_host="localhost", dispatcher_port=9000):
        """Connect to dispatcher and process commands until shutdown."""
        self.conn = connect(dispatcher_host, dispatcher_port)
        debug_print_worker(f"Worker {self.worker_id} connected to dispatcher")

        self.conn.send(RegisterWorker(worker_id=self.worker_id))
        reg_response = self.conn.recv()
        if not reg_response.success:
            print(f"Worker {self.worker_id} failed to register: {reg_response.error}")
            self.conn.close()
            return

        debug_print_worker(f"Worker {self.worker_id} registered successfully")

        self.running = True
        try:
            while self.running:
                cmd = self.conn.recv()
                response = self._process_command(cmd)
                response.seq = getattr(cmd, 'seq', 0)
                self.conn.send(response)
        finally:
            self.conn.close()
            debug_print_worker(f"Worker {self.worker_id} stopped")

    def _process_command(self, cmd: WorkerCommand) -> WorkerResponse:
        """Process a command from dispatcher."""
        try:
            if isinstance(cmd, WorkerRunJob):
                return self._handle_run_job(cmd)
            elif isinstance(cmd, WorkerLoadPartitions):
                return self._handle_load_partitions(cmd)
            elif isinstance(cmd, WorkerFreeDataset):
                return self._handle_free_dataset(cmd)
            elif isinstance(cmd, WorkerGetStats):
                return WorkerResponse(success=True, data=dict(self.stats))
            elif isinstance(cmd, WorkerShutdown):
                self.running = False
                return WorkerResponse(success=True)
            else:
                return WorkerResponse(success=False, error=f"Unknown command: {type(cmd)}")
        except Exception as e:
            if isinstance(cmd, WorkerRunJob):
                self.stats['failed_jobs'] += 1
            debug_print_worker(f"Worker {self.worker_id}: {type(cmd).__name__} failed: {e}")
            return failure_response(e)

    def _handle_load_partitions(self, cmd: WorkerLoadPartitions) -> WorkerResponse:
        """Store partitions."""
        self.datasets.setdefault(cmd.dataset_id, {}).update(cmd.partitions)
        self.stats['partitions'] += len(cmd.partitions)
        self.stats['records'] += sum(len(records) for records in cmd.partitions.values())
        debug_print_worker(f"Worker {self.worker_id}: loaded {sorted(cmd.partitions)} of {cmd.dataset_id}")
        return WorkerResponse(success=True)

    def _handle_run_job(self, cmd: WorkerRunJob) -> WorkerResponse:
        """Run the action on each local partition of the dataset, in index order."""
        if cmd.dataset_id not in self.datasets:
            return WorkerResponse(success=False, error=f"Dataset not found: {cmd.dataset_id}")

        self.stats['jobs'] += 1
        partitions = self.datasets[cmd.dataset_id]
        results = {}
        for index in sorted(partitions):
            results[index] = run_partition(index, partitions[index], cmd.stages, cmd.action)
            self.stats['tasks'] += 1
        debug_print_worker(f"Worker {self.worker_id}: {type(cmd.action).__name__} on {len(results)} partition(s)")
        return WorkerResponse(success=True, data=results)

    def _handle_free_dataset(self, cmd: WorkerFreeDataset) -> WorkerResponse:
        """Free a dataset."""
        partitions = self.datasets.pop(cmd.dataset_id, {})
        self.stats['partitions'] -= len(partitions)
        self.stats['records'] -= sum(len(records) for records in partitions.values())
        return WorkerResponse(success=True)
