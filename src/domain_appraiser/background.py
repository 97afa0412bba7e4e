"""
Background WHOIS augmentation.

When an evaluation skips the WHOIS lookup, the response goes out without
registration data and a patch job is queued here. The worker fetches the
WHOIS snapshot with retries and attaches it to the stored record and the
cached entry. Patching is idempotent and never touches the score.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .audit_logger import AuditLogger
from .config import RetryConfig
from .enums import AdapterErrorCode
from .exceptions import (
    AdapterError,
    AdapterTimeoutError,
    ConfigError,
    PersistenceError,
    UpstreamError,
)
from .fallback import AdapterFailure, WhoisSource
from .models import WhoisSnapshot
from .result_cache import ResultCache
from .retry_manager import RetryManager
from .state_store import AppraisalStore


COMPONENT = "whois-augmentation"

TRANSIENT_CODES = frozenset({AdapterErrorCode.TIMEOUT.value, AdapterErrorCode.UPSTREAM_ERROR.value})


@dataclass(frozen=True)
class WhoisPatchJob:
    """Identifies the appraisal that should receive WHOIS data."""

    record_id: Optional[int]
    domain: str
    options_hash: Optional[str]


def failure_to_error(failure: AdapterFailure) -> AdapterError:
    """Map an adapter failure onto the matching exception type."""
    if failure.is_config_error:
        return ConfigError(code=failure.code.value, message=failure.message)
    if failure.code == AdapterErrorCode.TIMEOUT:
        return AdapterTimeoutError(code=failure.code.value, message=failure.message)
    return UpstreamError(code=failure.code.value, message=failure.message)


def is_transient_error(error: Exception) -> bool:
    return isinstance(error, AdapterError) and error.code in TRANSIENT_CODES


class WhoisAugmentationWorker:
    """
    Queue consumer that attaches WHOIS data to already-returned appraisals.

    Jobs are processed one at a time. Transient failures (timeouts and
    upstream errors) are retried with exponential backoff; configuration
    failures are not. A job whose record no longer exists is a no-op.
    """

    def __init__(
        self,
        whois: Optional[WhoisSource],
        store: Optional[AppraisalStore] = None,
        cache: Optional[ResultCache] = None,
        retry_config: Optional[RetryConfig] = None,
        logger: Optional[AuditLogger] = None,
        timeout: float = 8.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the worker.

        Args:
            whois: WHOIS adapter (jobs are dropped when absent)
            store: Appraisal store holding the records to patch
            cache: Result cache holding the entries to patch
            retry_config: Backoff settings for transient failures
            logger: Optional audit logger
            timeout: Seconds a single WHOIS call may take
            sleep: Awaitable sleep used between retries
        """
        self._whois = whois
        self._store = store
        self._cache = cache
        self._logger = logger
        self._timeout = timeout
        self._retry_manager = RetryManager(retry_config or RetryConfig(), sleep=sleep)
        self._queue: asyncio.Queue[WhoisPatchJob] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, job: WhoisPatchJob) -> None:
        """
        Queue a job and make sure the consumer task is running.

        Must be called from a coroutine; the consumer is started on the
        running event loop and keeps working after the caller returns.
        """
        self._queue.put_nowait(job)
        self._log_debug("WHOIS patch queued", {"domain": job.domain, "record_id": job.record_id})
        self.start()

    def start(self) -> None:
        """Start consuming the queue on the running event loop."""
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def drain(self) -> None:
        """Wait until every queued job has been processed."""
        if not self.running and not self._queue.empty():
            self.start()
        await self._queue.join()

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.process(job)
            except Exception as e:
                if self._logger is not None:
                    self._logger.log_error(COMPONENT, "WHOIS patch crashed", e, {"domain": job.domain})
            finally:
                self._queue.task_done()

    async def process(self, job: WhoisPatchJob) -> bool:
        """
        Fetch WHOIS data for one job and patch the store and cache.

        Returns:
            True when at least one copy of the appraisal changed
        """
        if self._whois is None:
            self._log_info("No WHOIS adapter configured, patch dropped", {"domain": job.domain})
            return False

        async def fetch() -> WhoisSnapshot:
            try:
                result = await asyncio.wait_for(self._whois.fetch(job.domain), timeout=self._timeout)
            except asyncio.TimeoutError:
                raise AdapterTimeoutError(
                    code=AdapterErrorCode.TIMEOUT.value,
                    message=f"No response within {self._timeout:g}s",
                )
            if not result.ok:
                raise failure_to_error(result.failure)
            return result.value

        outcome = await self._retry_manager.execute_with_retry(fetch, is_retryable=is_transient_error)
        if not outcome.success:
            error = outcome.last_error
            if self._logger is not None:
                self._logger.warn(COMPONENT, "WHOIS patch failed", {
                    "domain": job.domain,
                    "attempts": outcome.attempts,
                    "error_code": getattr(error, "code", None),
                    "reason": str(error),
                })
            return False

        snapshot = outcome.result
        store_changed = False
        if self._store is not None and job.record_id is not None:
            try:
                store_changed = self._store.patch_whois(job.record_id, snapshot)
            except PersistenceError as e:
                if self._logger is not None:
                    self._logger.log_error(COMPONENT, "Failed to patch stored appraisal", e, {
                        "domain": job.domain,
                        "record_id": job.record_id,
                    })

        cache_changed = False
        if self._cache is not None:
            cache_changed = await self._cache.patch_whois(job.domain, job.options_hash, snapshot)

        self._log_info("WHOIS patch applied", {
            "domain": job.domain,
            "record_id": job.record_id,
            "attempts": outcome.attempts,
            "store_changed": store_changed,
            "cache_changed": cache_changed,
        })
        return store_changed or cache_changed

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger is not None:
            self._logger.info(COMPONENT, message, data)

    def _log_debug(self, message: str, data: dict) -> None:
        if self._logger is not None:
            self._logger.debug(COMPONENT, message, data)
