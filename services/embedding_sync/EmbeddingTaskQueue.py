"""Background queue for embedding jobs.

Webhook handlers submit a job and return immediately; a small pool of worker
tasks drains the queue. Failed jobs are logged and counted but never retried:
the next edit of the entity is the retry. On shutdown the queue is drained
before the workers stop, so accepted jobs are not dropped.
"""

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from shared.helper.HelperConfig import HelperConfig

DEFAULT_WORKERS = 2
MAX_RECENT_ERRORS = 20

JobFactory = Callable[[], Awaitable[Any]]


@dataclass
class _Job:
    name: str
    factory: JobFactory


class EmbeddingTaskQueue:
    def __init__(self, helper_config: HelperConfig, workers: int | None = None) -> None:
        self.logging = helper_config.get_logger()
        if workers is None:
            workers = int(helper_config.get_number_val("EMBEDDING_QUEUE_WORKERS", default=DEFAULT_WORKERS))
        self._worker_count = max(1, workers)
        self._queue: asyncio.Queue[_Job] = asyncio.Queue()
        self._workers: list[asyncio.Task] = []
        self._accepting = False
        self._processed = 0
        self._failed = 0
        self._recent_errors: deque[str] = deque(maxlen=MAX_RECENT_ERRORS)

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    def is_running(self) -> bool:
        return bool(self._workers)

    async def start(self) -> None:
        """Spawn the worker tasks. Calling start() twice is a no-op."""
        if self._workers:
            return
        self._accepting = True
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"embedding-worker-{index}")
            for index in range(self._worker_count)
        ]
        self.logging.info("Embedding queue started with %d worker(s).", self._worker_count)

    async def shutdown(self, drain: bool = True) -> None:
        """Stop accepting jobs and stop the workers.

        Args:
            drain (bool): Wait until every queued and running job has finished
                before cancelling the workers. Without drain, queued jobs are
                dropped and logged.
        """
        self._accepting = False
        if not self._workers:
            return
        if drain:
            await self._queue.join()
        else:
            dropped = 0
            while not self._queue.empty():
                self._queue.get_nowait()
                self._queue.task_done()
                dropped += 1
            if dropped:
                self.logging.warning("Embedding queue shut down without drain, dropped %d job(s).", dropped)

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self.logging.info("Embedding queue stopped (%d processed, %d failed).", self._processed, self._failed)

    ##########################################
    ################ SUBMIT ##################
    ##########################################

    def submit(self, name: str, factory: JobFactory) -> None:
        """Queue a job. Returns immediately.

        Args:
            name (str): Label used in logs and stats, e.g. "process course 42".
            factory (JobFactory): Zero-argument callable returning the coroutine
                to run. The coroutine is created by the worker, not here.

        Raises:
            RuntimeError: If the queue is not running.
        """
        if not self._accepting:
            raise RuntimeError("Embedding queue is not accepting jobs.")
        self._queue.put_nowait(_Job(name=name, factory=factory))
        self.logging.debug("Queued job '%s' (%d pending).", name, self._queue.qsize())

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    def stats(self) -> dict[str, Any]:
        return {
            "running": self.is_running(),
            "workers": len(self._workers),
            "pending": self._queue.qsize(),
            "processed": self._processed,
            "failed": self._failed,
            "recent_errors": list(self._recent_errors),
        }

    ##########################################
    ################ WORKER ##################
    ##########################################

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await job.factory()
                self._processed += 1
                self.logging.debug("Worker %d finished job '%s'.", index, job.name)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._failed += 1
                self._recent_errors.append(f"{job.name}: {e}")
                self.logging.error("Embedding job '%s' failed: %s", job.name, e)
            finally:
                self._queue.task_done()
