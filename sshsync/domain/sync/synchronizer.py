"""
Directory synchronization engine
"""
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, List, Optional, Set, Union

from ...core.constants import SUBMIT_WINDOW_PER_WORKER
from ...core.exceptions import Cancelled, LocalIOError, TaskError
from ...core.interfaces import SessionProvider
from ...core.logging import get_logger
from ...core.utils import normalize_remote_root
from ..command import mkdir_command, run_command
from ..transfer import copy_file
from .models import SyncConfig, SyncReport, TransferTask
from .walker import TreeWalker

logger = get_logger(__name__)


class _SyncRun:
    """State owned by a single sync() call"""

    def __init__(self, cancel_event: threading.Event, window: int):
        self.cancel_event = cancel_event
        # set on caller cancellation or interrupt; workers poll it
        self.abort = threading.Event()
        self.report = SyncReport()
        self.error: Optional[TaskError] = None
        # submitted and not yet finished; bounded by the window semaphore
        self.pending: Set[Future] = set()
        self.window = threading.BoundedSemaphore(window)
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        if self.cancel_event.is_set():
            self.abort.set()
        return self.abort.is_set()

    @property
    def stopped(self) -> bool:
        return self.cancelled or self.error is not None

    def fail(self, task: TransferTask, cause: BaseException) -> None:
        with self._lock:
            if self.error is None:
                self.error = TaskError(task, cause)
                self.error.__cause__ = cause
                logger.error(str(self.error))
            else:
                logger.debug(f"Additional failure after stop: {task.local_path}: {cause}")

    def record(self, task: TransferTask, size: int = 0) -> None:
        with self._lock:
            if task.is_directory:
                self.report.directories_created += 1
            else:
                self.report.files_copied += 1
                self.report.bytes_copied += size

    def track(self, future: Future) -> None:
        with self._lock:
            self.pending.add(future)
        future.add_done_callback(self._untrack)

    def _untrack(self, future: Future) -> None:
        with self._lock:
            self.pending.discard(future)
        self.window.release()

    def outstanding(self) -> List[Future]:
        with self._lock:
            return list(self.pending)


class DirectorySynchronizer:
    """
    Mirror a local directory tree onto a remote path.

    Work proceeds one tree level at a time. Every directory of a level is
    created remotely (``mkdir -p``) and awaited as a barrier; the level is
    then listed, its files handed to the worker pool without waiting, and its
    subdirectories become the next level. File copies therefore overlap with
    later barriers, and nothing is ever written below a directory whose
    create has not completed.

    At most ``workers * SUBMIT_WINDOW_PER_WORKER`` tasks are queued or
    running at once; the walk waits for a free slot before queueing more.

    The first failure stops dispatch: queued tasks are dropped, tasks already
    running finish, and sync() raises TaskError naming the failed entry.
    Setting ``cancel_event`` aborts in-flight sessions and makes sync() raise
    Cancelled. Nothing is rolled back; re-running is safe because directory
    creation is idempotent and copies overwrite.
    """

    def __init__(
        self,
        client: SessionProvider,
        config: Optional[SyncConfig] = None,
        cancel_event: Optional[threading.Event] = None,
        on_task_done: Optional[Callable[[TransferTask], None]] = None,
    ):
        """
        Initialize synchronizer.

        Args:
            client: Connected session provider, shared by all workers
            config: Sync configuration (defaults to SyncConfig())
            cancel_event: Caller-owned cancellation signal
            on_task_done: Callback after each task completes successfully
        """
        self.client = client
        self.config = config or SyncConfig()
        self.cancel_event = cancel_event or threading.Event()
        self.on_task_done = on_task_done

    def sync(self, local_root: Union[str, Path], remote_root: str) -> SyncReport:
        """
        Sync ``local_root`` to ``remote_root``.

        Returns:
            SyncReport with counts and skipped entries

        Raises:
            LocalIOError: local_root is missing or not a directory
            TaskError: A directory create, listing or file copy failed
            Cancelled: cancel_event was set before the sync finished
        """
        walker = TreeWalker(
            Path(local_root),
            normalize_remote_root(remote_root),
            self.config.symlink_policy,
        )
        root = walker.root_task()
        run = _SyncRun(
            self.cancel_event,
            window=self.config.workers * SUBMIT_WINDOW_PER_WORKER,
        )

        logger.info(
            f"Syncing {root.local_path} → {root.remote_path} "
            f"with {self.config.workers} worker(s)"
        )
        started = time.monotonic()

        with ThreadPoolExecutor(
            max_workers=self.config.workers,
            thread_name_prefix="sshsync-worker",
        ) as pool:
            try:
                level = [root]
                while level and not run.stopped:
                    # barrier: this level exists remotely before anything inside it
                    barrier = []
                    for task in level:
                        future = self._submit(pool, run, task)
                        if future is None:
                            break
                        barrier.append(future)
                    self._wait(run, barrier)
                    if run.stopped:
                        break

                    next_level: List[TransferTask] = []
                    for parent in level:
                        if run.stopped:
                            break
                        try:
                            children = walker.children(parent)
                        except LocalIOError as e:
                            run.fail(parent, e)
                            break
                        for task in children:
                            if run.stopped:
                                break
                            if task.is_directory:
                                next_level.append(task)
                            else:
                                self._submit(pool, run, task)
                    level = next_level

                self._wait(run, run.outstanding())
            except BaseException:
                run.abort.set()
                raise
            finally:
                for future in run.outstanding():
                    future.cancel()

        run.report.skipped = list(walker.skipped)

        if run.cancelled:
            raise Cancelled(f"Sync of {root.local_path} cancelled") from run.error
        if run.error is not None:
            raise run.error

        logger.info(
            f"Synced {run.report.directories_created} directories and "
            f"{run.report.files_copied} files ({run.report.bytes_copied} bytes) "
            f"in {time.monotonic() - started:.2f}s"
        )
        return run.report

    def _submit(self, pool: ThreadPoolExecutor, run: _SyncRun, task: TransferTask) -> Optional[Future]:
        """
        Queue a task once a window slot is free.

        Blocks the walk while the pool is saturated, so memory stays bounded
        by the window rather than the tree size. Returns None if the run
        stops while waiting.
        """
        while not run.window.acquire(timeout=self.config.poll_interval):
            if run.stopped:
                return None
        if run.stopped:
            run.window.release()
            return None
        try:
            future = pool.submit(self._execute, run, task)
        except BaseException:
            run.window.release()
            raise
        run.track(future)
        return future

    def _wait(self, run: _SyncRun, futures: List[Future]) -> None:
        """Wait for futures, dropping queued ones as soon as the run stops"""
        remaining = [f for f in futures if not f.done()]
        while remaining:
            if run.stopped:
                for future in remaining:
                    future.cancel()
            _, not_done = wait(remaining, timeout=self.config.poll_interval)
            remaining = list(not_done)

    def _execute(self, run: _SyncRun, task: TransferTask) -> None:
        """Worker body: one task, one session"""
        if run.stopped:
            return

        try:
            if task.is_directory:
                run_command(
                    self.client,
                    mkdir_command(task.remote_path),
                    cancel_event=run.abort,
                    poll_interval=self.config.poll_interval,
                )
                run.record(task)
            else:
                size = copy_file(
                    self.client,
                    task.local_path,
                    task.remote_path,
                    chunk_size=self.config.chunk_size,
                    cancel_event=run.abort,
                )
                run.record(task, size)
            if self.on_task_done:
                self.on_task_done(task)
        except Cancelled:
            logger.debug(f"Aborted {task.kind.value} {task.local_path}")
            return
        except Exception as e:
            run.fail(task, e)


def sync_directory(
    client: SessionProvider,
    local_root: Union[str, Path],
    remote_root: str,
    config: Optional[SyncConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SyncReport:
    """Sync a local tree to a remote path over an open connection"""
    return DirectorySynchronizer(client, config, cancel_event).sync(local_root, remote_root)
