"""
Retrying clone attempts with exponential backoff.

The policy is kept apart from the clone itself: ``RetryPolicy.run`` takes the
fallible operation and the wait function, so tests drive it with a fake clock.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple, Type, TypeVar

from repofetch.config import DEFAULT_MAX_ATTEMPTS
from repofetch.exceptions import CloneError
from repofetch.model.request import FetchRequest

from .clone import CloneExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and backoff schedule.

    ``delay(attempt)`` is ``base ** attempt`` seconds: 1, 2, 4, ... for the
    default base. The wait happens after every attempt, the last one included.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = (CloneError,)

    def delay(self, attempt: int) -> float:
        return self.base**attempt

    def run(
        self,
        operation: Callable[[int], T],
        wait: Callable[[float], None],
    ) -> Optional[T]:
        """
        Call ``operation(attempt)`` until it succeeds or the budget is spent.

        Exceptions outside ``retry_on`` propagate immediately. When every
        attempt fails, the error of the last one is raised.
        """
        attempt = 0
        result: Optional[T] = None
        error: Optional[BaseException] = None

        while attempt == 0 or (error is not None and attempt < self.max_attempts):
            try:
                result = operation(attempt)
                error = None
            except self.retry_on as e:
                error = e
                logger.debug(f"Attempt {attempt} of {self.max_attempts} failed: {e}")

            # wait with exponential backoff
            wait(self.delay(attempt))

            attempt += 1

        if error is not None:
            raise error
        return result


class RetryingCloner:
    """Clone with the retry policy around ``CloneExecutor.clone_once``."""

    def __init__(
        self,
        executor: CloneExecutor,
        wait: Callable[[float], None],
        policy: Optional[RetryPolicy] = None,
    ):
        self.executor = executor
        self.wait = wait
        self.policy = policy or RetryPolicy()

    def clone_with_retry(
        self,
        request: FetchRequest,
        subdirectory: str,
        max_attempts: Optional[int] = None,
    ) -> Path:
        """
        Clone ``request`` into ``subdirectory``, retrying failed attempts.

        Args:
            request: The fetch request
            subdirectory: Target directory relative to the workspace
            max_attempts: Override of the policy's attempt budget

        Returns:
            The directory the repository was cloned into

        Raises:
            CloneFailed, SubmoduleFailed: The error of the last attempt
            ConfigurationError, FetchCancelled: Immediately, never retried
        """
        policy = self.policy
        if max_attempts is not None:
            policy = RetryPolicy(max_attempts, policy.base, policy.retry_on)

        def attempt_clone(attempt: int) -> Path:
            try:
                return self.executor.clone_once(request, subdirectory)
            except CloneError as e:
                logger.info(
                    f"Attempt {attempt} cloning git repository {request.repository_name} to branch {request.branch} and revision {request.revision} failed: {e}"
                )
                raise

        return policy.run(attempt_clone, self.wait)
