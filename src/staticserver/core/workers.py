"""
=============================================================================
WORKER POOL: ONE SPAWN INTERFACE, TWO STRATEGIES
=============================================================================

The accept loop hands every connection to WorkerPool.submit() and goes
straight back to accept(). How the work actually runs depends on one
setting, max_workers:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  max_workers=None (default): THREAD PER TASK                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   for connection in accept_connections():                           │
    │       Thread(target=handle, args=(connection,)).start()             │
    │                                                                      │
    │   + a slow client never delays anyone else                          │
    │   - no limit: 10,000 connections = 10,000 threads                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │  max_workers=N: FIXED WORKERS + TASK QUEUE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   [Task 1] [Task 2] [Task 3] ...      (unbounded queue.Queue)       │
    │        │                                                             │
    │        ▼ get()                                                       │
    │   ┌──────────┐ ┌──────────┐ ┌──────────┐                            │
    │   │ Worker 1 │ │ Worker 2 │ │ Worker N │   daemon threads            │
    │   └──────────┘ └──────────┘ └──────────┘                            │
    │                                                                      │
    │   + bounded thread count                                             │
    │   - N slow clients stall everyone queued behind them                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

In both modes submit() never blocks: the queue has no size limit, so the
accept loop can't get stuck behind request processing.

=============================================================================
WORKER LIFECYCLE (bounded mode)
=============================================================================

    def run(self):
        while True:
            task = queue.get()      ← BLOCKS until task available
            if task is None:        ← "Poison pill" signals shutdown
                break
            execute(task)           ← Exceptions are logged, never raised
            queue.task_done()

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Worker thread states, for monitoring and debugging."""
    IDLE = "idle"        # Waiting for task
    BUSY = "busy"        # Executing task
    STOPPED = "stopped"  # Thread exited


@dataclass
class Task:
    """
    A deferred function call: "call this function with these arguments".

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        kwargs: Keyword arguments for the function.
        submitted_at: Time the task was submitted.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)

    def run(self, runner: str) -> bool:
        """
        Execute the task, logging (never raising) any exception.

        Args:
            runner: Name of the executing thread, for log messages.

        Returns:
            True if the task completed, False if it raised.
        """
        start_time = time.time()
        try:
            self.func(*self.args, **self.kwargs)
        except Exception as e:
            elapsed = time.time() - start_time
            logger.exception(f"{runner} task failed after {elapsed:.3f}s: {e}")
            return False

        elapsed = time.time() - start_time
        logger.debug(f"{runner} completed task in {elapsed:.3f}s")
        return True


class Worker(threading.Thread):
    """
    Long-lived worker thread that processes tasks from a shared queue.

    Only used when the pool is bounded.
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()

            # Poison pill: shutdown() puts one None per worker
            if task is None:
                self.task_queue.task_done()
                break

            self.state = WorkerState.BUSY
            try:
                if task.run(self.name):
                    self.tasks_completed += 1
                else:
                    self.tasks_failed += 1
            finally:
                self.state = WorkerState.IDLE
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")


class WorkerPool:
    """
    Runs submitted tasks concurrently, bounded or unbounded.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      WorkerPool Usage                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   pool = WorkerPool()                  # thread per task             │
    │   pool = WorkerPool(max_workers=32)    # 32 workers + queue         │
    │                                                                      │
    │   pool.start()                                                       │
    │   pool.submit(handler.handle, args=(conn,))                         │
    │   print(pool.stats)                                                  │
    │   pool.shutdown(wait=True, timeout=5.0)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, max_workers: Optional[int] = None):
        """
        Args:
            max_workers: Number of worker threads, or None for one new
                         thread per submitted task.
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be >= 1 or None")

        self.max_workers = max_workers

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue()
        self._workers: list[Worker] = []
        self._task_threads: set[threading.Thread] = set()
        self._lock = threading.Lock()  # Protects _task_threads and counters
        self._started = False
        self._shutdown = False
        self._next_thread_id = 0
        self._completed = 0
        self._failed = 0

    @property
    def is_bounded(self) -> bool:
        return self.max_workers is not None

    def start(self):
        """
        Start the pool.

        Bounded pools create all their workers here; unbounded pools
        create threads on demand in submit().
        """
        if self._started:
            return  # Already started

        if self.is_bounded:
            logger.info(f"Starting worker pool with {self.max_workers} workers")
            for worker_id in range(self.max_workers):
                worker = Worker(self._task_queue, worker_id)
                self._workers.append(worker)
                worker.start()
        else:
            logger.info("Starting worker pool (one thread per connection)")

        self._shutdown = False
        self._started = True

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> None:
        """
        Run func(*args, **kwargs) on another thread. Never blocks.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Worker pool not started")

        if self._shutdown:
            raise RuntimeError("Worker pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        if self.is_bounded:
            self._task_queue.put(task)
            return

        with self._lock:
            thread_id = self._next_thread_id
            self._next_thread_id += 1
            thread = threading.Thread(
                target=self._run_task,
                args=(task,),
                name=f"Handler-{thread_id}",
                daemon=True,
            )
            self._task_threads.add(thread)
        thread.start()

    def _run_task(self, task: Task):
        """Thread body for unbounded mode."""
        thread = threading.current_thread()
        succeeded = False
        try:
            succeeded = task.run(thread.name)
        finally:
            with self._lock:
                self._task_threads.discard(thread)
                if succeeded:
                    self._completed += 1
                else:
                    self._failed += 1

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop accepting tasks and stop the workers.

        Args:
            wait: Wait for tasks already submitted to finish.
            timeout: Upper bound on the wait, in seconds (None = forever).
        """
        if not self._started:
            return

        logger.info("Shutting down worker pool...")
        self._shutdown = True
        deadline = None if timeout is None else time.time() + timeout

        def remaining() -> Optional[float]:
            if deadline is None:
                return None
            return max(0.0, deadline - time.time())

        if self.is_bounded:
            # One poison pill per worker, queued behind the pending tasks
            for _ in self._workers:
                self._task_queue.put(None)
            if wait:
                for worker in self._workers:
                    worker.join(timeout=remaining())
            with self._lock:
                self._completed += sum(w.tasks_completed for w in self._workers)
                self._failed += sum(w.tasks_failed for w in self._workers)
            self._workers.clear()
        elif wait:
            with self._lock:
                threads = list(self._task_threads)
            for thread in threads:
                thread.join(timeout=remaining())

        self._started = False
        logger.info("Worker pool shutdown complete")

    @property
    def active_tasks(self) -> int:
        """Number of tasks currently running."""
        if self.is_bounded:
            return sum(1 for w in self._workers if w.state == WorkerState.BUSY)
        with self._lock:
            return len(self._task_threads)

    @property
    def stats(self) -> dict:
        """
        Get pool statistics.

        Useful for debugging and for a future status endpoint.
        """
        with self._lock:
            completed, failed = self._completed, self._failed
        if self.is_bounded:
            completed += sum(w.tasks_completed for w in self._workers)
            failed += sum(w.tasks_failed for w in self._workers)

        return {
            "max_workers": self.max_workers,
            "active": self.active_tasks,
            "queued": self._task_queue.qsize() if self.is_bounded else 0,
            "completed": completed,
            "failed": failed,
        }
