"""Fixed-interval, deadline-bounded polling used by every reconciliation step."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from eni_lifecycle.domain.base.exceptions import (
    EntityNotFoundError,
    PollTimeoutError,
    ProviderError,
    TransientError,
)
from eni_lifecycle.infrastructure.logging.logger import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class PollOutcome(str, Enum):
    CONTINUE = "continue"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PollResult(Generic[T]):
    """What a check observed on one invocation."""

    outcome: PollOutcome
    state: Optional[T] = None
    error: Optional[BaseException] = None
    observation: Optional[str] = None

    @classmethod
    def keep_polling(
        cls, observation: Optional[str] = None, error: Optional[BaseException] = None
    ) -> "PollResult[T]":
        """Target not reached yet; ``error`` is a tolerated provider error, if any."""
        return cls(PollOutcome.CONTINUE, error=error, observation=observation)

    @classmethod
    def done(cls, state: Optional[T] = None) -> "PollResult[T]":
        return cls(PollOutcome.DONE, state=state)

    @classmethod
    def failed(cls, error: BaseException) -> "PollResult[T]":
        return cls(PollOutcome.FAILED, error=error)


class Poller:
    """
    Repeatedly invoke a check until it reports success, failure or the deadline passes.

    The interval between checks is fixed rather than exponential: the provider
    converges within seconds to minutes, and deadlines are wall-clock based.
    ``clock`` and ``sleep`` are injectable so tests can run without waiting.
    """

    def __init__(
        self,
        interval: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep

    def poll(
        self,
        check: Callable[[], PollResult[T]],
        timeout: float,
        operation: str,
        entity_id: str,
        not_found_is_done: bool = False,
    ) -> Optional[T]:
        """
        Run ``check`` until it returns Done or Failed.

        Args:
            check: State check invoked once per interval
            timeout: Wall-clock budget in seconds
            operation: Operation name used in logs and timeout errors
            entity_id: Identity of the entity being reconciled
            not_found_is_done: Treat EntityNotFoundError from the check as success

        Returns:
            The state carried by the Done result

        Raises:
            PollTimeoutError: If the deadline elapses first
            Exception: The error carried by a Failed result, or any
                non-transient error raised by the check
        """
        deadline = self._clock() + timeout
        last_error: Optional[BaseException] = None
        last_observation: Optional[str] = None
        attempt = 0

        while True:
            attempt += 1
            try:
                result = check()
            except EntityNotFoundError:
                if not not_found_is_done:
                    raise
                logger.debug(
                    "%s of %s observed absence on attempt %d", operation, entity_id, attempt
                )
                return None
            except TransientError as e:
                logger.warning(
                    "Transient error during %s of %s (attempt %d): %s",
                    operation,
                    entity_id,
                    attempt,
                    e,
                )
                result = PollResult.keep_polling(error=e)

            if result.outcome == PollOutcome.DONE:
                logger.debug("%s of %s completed on attempt %d", operation, entity_id, attempt)
                return result.state
            if result.outcome == PollOutcome.FAILED:
                logger.error("%s of %s failed: %s", operation, entity_id, result.error)
                raise result.error

            if result.error is not None:
                last_error = result.error
            if result.observation is not None:
                last_observation = result.observation
            logger.debug(
                "%s of %s not complete on attempt %d: %s",
                operation,
                entity_id,
                attempt,
                result.observation or result.error or "pending",
            )

            remaining = deadline - self._clock()
            if remaining <= 0:
                error = PollTimeoutError(
                    operation,
                    entity_id,
                    timeout,
                    last_error=last_error,
                    last_observation=last_observation,
                )
                logger.error(str(error))
                raise error
            self._sleep(min(self.interval, remaining))

    def retry(
        self,
        call: Callable[[], T],
        is_retryable: Callable[[ProviderError], bool],
        timeout: float,
        operation: str,
        entity_id: str,
        not_found_is_done: bool = False,
    ) -> Optional[T]:
        """
        Repeat a mutating call on the poll interval while its error is retryable.

        Transient errors are always retried; ``is_retryable`` decides for the
        other classified errors. Unclassified exceptions propagate immediately.
        """

        def check() -> PollResult[Any]:
            try:
                return PollResult.done(call())
            except (EntityNotFoundError, TransientError):
                raise
            except ProviderError as e:
                if not is_retryable(e):
                    raise
                logger.warning("Retrying %s of %s after: %s", operation, entity_id, e)
                return PollResult.keep_polling(error=e)

        return self.poll(
            check,
            timeout=timeout,
            operation=operation,
            entity_id=entity_id,
            not_found_is_done=not_found_is_done,
        )
