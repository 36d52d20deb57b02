import logging
import time
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class CircuitOpenError(ConnectionError):
    pass


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        failure_threshold: int = 3,
        base_recovery_time: int = 10,
        max_recovery_time: int = 60,
    ):
        self.name = name
        self.failure_count = 0
        self.failure_threshold = failure_threshold
        self.base_recovery_time = base_recovery_time
        self.max_recovery_time = max_recovery_time
        self.last_failure_time = 0.0
        self.state = "CLOSED"

    @property
    def current_recovery_time(self):
        return min(
            self.base_recovery_time
            * (2 ** max(self.failure_count - self.failure_threshold, 0)),
            self.max_recovery_time,
        )

    def _open(self):
        self.state = "OPEN"
        self.last_failure_time = time.time()
        logger.warning(
            "Circuit %s opened after %s failures.", self.name, self.failure_count
        )

    def _half_open(self):
        self.state = "HALF_OPEN"
        logger.info("Circuit %s half-open: testing...", self.name)

    def _close(self):
        if self.state != "CLOSED":
            logger.info("Circuit %s closed: stable again.", self.name)
        self.state = "CLOSED"
        self.failure_count = 0

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        now = time.time()

        if self.state == "OPEN":
            cooldown = self.current_recovery_time
            elapsed = now - self.last_failure_time
            if elapsed < cooldown:
                raise CircuitOpenError(
                    f"Circuit {self.name} still open, retry after {cooldown - elapsed:.1f}s"
                )
            self._half_open()

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            self.failure_count += 1
            logger.error(
                "Circuit %s call failed (%s): %s", self.name, self.failure_count, e
            )
            if self.failure_count >= self.failure_threshold:
                self._open()
            raise

        self._close()
        return result


cache_breaker = CircuitBreaker("cache", failure_threshold=3, base_recovery_time=10)
events_breaker = CircuitBreaker("events", failure_threshold=3, base_recovery_time=10)
auth_breaker = CircuitBreaker("auth", failure_threshold=3, base_recovery_time=15)
