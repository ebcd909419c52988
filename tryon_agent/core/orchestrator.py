"""Retry-governed composition orchestrator."""

import asyncio
from typing import Awaitable, Callable, List, Optional

from pydantic import ValidationError

from .classifier import classify_response
from .request_builder import BuiltRequest, RequestBuilder
from ..models.enums import AttemptState, ClothingState, ClothingType, FitStyle, Outcome
from ..models.schemas import (
    Classification,
    GenerationAttempt,
    GenerationRequest,
    GenerationResult,
)
from ..providers.gemini import GeminiTransport
from ..utils.errors import Cancelled, EncodingError, GenerationError, TransportError
from ..utils.logger import get_logger
from ..utils.retry import RetryPolicy

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class Orchestrator:
    """
    Runs Builder -> Transport -> Classifier under a bounded retry policy.

    State machine:
        ATTEMPTING --success--> SUCCEEDED
        ATTEMPTING --fatal--> EXHAUSTED
        ATTEMPTING --retryable, attempts left--> WAITING --backoff--> ATTEMPTING
        ATTEMPTING --retryable, no attempts left--> EXHAUSTED
        any suspension point --cancel--> CANCELLED

    The instance holds no per-call state, so concurrent ``compose`` calls are
    independent.

    Cancelling the task that runs ``compose`` does not propagate. The
    ``CancelledError`` is absorbed and the cancel request is withdrawn with
    ``Task.uncancel()``. The task then finishes normally with a CANCELLED
    result, so callers that must stop check ``result.cancelled``.
    """

    def __init__(
        self,
        transport: GeminiTransport,
        builder: Optional[RequestBuilder] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Initialize orchestrator.

        Args:
            transport: Object with ``async send(body) -> TransportResponse``
            builder: Request builder (default settings if omitted)
            policy: Retry policy (3 attempts, 1s base delay if omitted)
            sleep: Awaitable used for backoff waits
        """
        self.transport = transport
        self.builder = builder or RequestBuilder()
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def compose(
        self,
        person_image: bytes,
        clothing_image: bytes,
        clothing_type: ClothingType,
        fit_style: FitStyle,
        clothing_state: ClothingState,
    ) -> GenerationResult:
        """
        Compose the clothing onto the person.

        Returns:
            GenerationResult; errors are carried in the result, never raised
        """
        try:
            request = GenerationRequest(
                person_image=person_image,
                clothing_image=clothing_image,
                clothing_type=clothing_type,
                fit_style=fit_style,
                clothing_state=clothing_state,
            )
        except ValidationError as e:
            return self._finish(
                AttemptState.EXHAUSTED,
                [],
                0.0,
                error=EncodingError(f"Invalid generation request: {e.error_count()} errors"),
            )

        return await self.run(request)

    async def run(self, request: GenerationRequest) -> GenerationResult:
        """Execute the retry loop for an already validated request."""
        attempts: List[GenerationAttempt] = []
        slept = 0.0

        try:
            built = self.builder.build(request)
        except EncodingError as e:
            return self._finish(AttemptState.EXHAUSTED, attempts, slept, error=e)

        attempt_number = 1
        while True:
            attempt = GenerationAttempt(
                attempt_number=attempt_number,
                backoff_delay=self.policy.delay_for(attempt_number),
            )
            attempts.append(attempt)

            logger.info(
                f"Sending composition request (attempt {attempt_number}/{self.policy.max_attempts})",
                extra={
                    "state": AttemptState.ATTEMPTING.value,
                    "attempt": attempt_number,
                    "body_kb": len(built.body) / 1024,
                }
            )

            try:
                classification = await self._dispatch(built)
            except asyncio.CancelledError:
                return self._cancelled(attempts, slept, "network")

            self._record(attempt, classification)

            if classification.outcome == Outcome.SUCCESS:
                return self._finish(
                    AttemptState.SUCCEEDED, attempts, slept, image=classification.image
                )

            if classification.outcome == Outcome.FATAL:
                return self._finish(
                    AttemptState.EXHAUSTED, attempts, slept, error=classification.error
                )

            if not self.policy.can_retry(attempt_number):
                return self._finish(
                    AttemptState.EXHAUSTED, attempts, slept, error=classification.error
                )

            logger.warning(
                f"Retryable failure, retrying in {attempt.backoff_delay}s "
                f"(attempt {attempt_number}/{self.policy.max_attempts})",
                extra={
                    "state": AttemptState.WAITING.value,
                    "attempt": attempt_number,
                    "status": attempt.status_code,
                    "delay_seconds": attempt.backoff_delay,
                }
            )

            try:
                await self._sleep(attempt.backoff_delay)
            except asyncio.CancelledError:
                return self._cancelled(attempts, slept, "backoff")

            slept += attempt.backoff_delay
            attempt_number += 1

    async def _dispatch(self, built: BuiltRequest) -> Classification:
        try:
            response = await self.transport.send(built.body)
        except TransportError as e:
            return Classification.fatal(e)
        return classify_response(response.status_code, response.content)

    @staticmethod
    def _record(attempt: GenerationAttempt, classification: Classification):
        attempt.outcome = classification.outcome
        error = classification.error
        if error is not None:
            attempt.error = type(error).__name__
            attempt.status_code = getattr(error, "status_code", None)
        else:
            attempt.status_code = 200

    def _cancelled(
        self,
        attempts: List[GenerationAttempt],
        slept: float,
        where: str,
    ) -> GenerationResult:
        task = asyncio.current_task()
        if task is not None:
            task.uncancel()
        return self._finish(
            AttemptState.CANCELLED,
            attempts,
            slept,
            error=Cancelled(f"Composition cancelled during {where}"),
        )

    def _finish(
        self,
        state: AttemptState,
        attempts: List[GenerationAttempt],
        slept: float,
        image=None,
        error: Optional[GenerationError] = None,
    ) -> GenerationResult:
        result = GenerationResult(
            state=state,
            image=image,
            error=error,
            attempts=attempts,
            total_backoff_seconds=slept,
        )

        extra = {
            "state": state.value,
            "attempts": len(attempts),
            "backoff_seconds": slept,
        }
        if error is not None:
            extra["error_type"] = type(error).__name__
            extra["error"] = str(error)

        if state == AttemptState.SUCCEEDED:
            logger.info("Composition succeeded", extra=extra)
        elif state == AttemptState.CANCELLED:
            logger.info("Composition cancelled", extra=extra)
        else:
            logger.error("Composition failed", extra=extra)

        return result
