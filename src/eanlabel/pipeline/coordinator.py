"""
Batch coordination.

Runs the label composer over a list of identifiers concurrently and
collects one outcome per identifier, in input order. Every task is allowed
to settle; a failing identifier never cancels or blocks the others.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Sequence

from .worker import LabelArtifact, LabelFailure, LabelResult

LOGGER = logging.getLogger(__name__)

DEFAULT_WORKERS = 8


@dataclass(frozen=True)
class BatchResult:
    """
    Ordered per-identifier outcomes of one batch.

    Attributes:
        outcomes: One LabelArtifact or LabelFailure per submitted identifier
        elapsed_seconds: Wall time from submission until every task settled
    """

    outcomes: tuple[LabelResult, ...]
    elapsed_seconds: float = 0.0

    @property
    def artifacts(self) -> list[LabelArtifact]:
        return [o for o in self.outcomes if isinstance(o, LabelArtifact)]

    @property
    def failures(self) -> list[LabelFailure]:
        return [o for o in self.outcomes if isinstance(o, LabelFailure)]

    @property
    def succeeded(self) -> int:
        return len(self.artifacts)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass
class BatchCoordinator:
    """
    Fans identifiers out to a composer and gathers the outcomes.

    Parameters:
        compose: Callable turning one identifier into a LabelResult,
            usually `LabelComposer.compose`
        max_workers: Upper bound on concurrently composed labels

    Example:
        >>> coordinator = BatchCoordinator(compose=composer.compose)
        >>> result = coordinator.run(["4006381333931", "400638133393"])
        >>> result.succeeded, result.failed
        (2, 0)
    """

    compose: Callable[[str], LabelResult]
    max_workers: int = DEFAULT_WORKERS
    _outcome_hooks: list[Callable[[LabelResult], None]] = field(default_factory=list, repr=False)

    def add_outcome_hook(self, hook: Callable[[LabelResult], None]) -> None:
        """Register a callable invoked once per settled identifier (e.g. progress output)."""
        self._outcome_hooks.append(hook)

    def run(self, identifiers: Sequence[str]) -> BatchResult:
        """
        Compose every identifier and wait for all of them to settle.

        Never raises for per-identifier problems: an exception escaping
        the composer is recorded as a LabelFailure for that identifier.
        """
        start_time = time.perf_counter()
        if not identifiers:
            return BatchResult(outcomes=())

        workers = max(1, min(self.max_workers, len(identifiers)))
        LOGGER.info("batch_started", extra={"count": len(identifiers), "workers": workers})

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="eanlabel") as pool:
            futures = [pool.submit(self.compose, identifier) for identifier in identifiers]
            outcomes: list[LabelResult] = []
            for identifier, future in zip(identifiers, futures):
                outcome = self._settle(identifier, future)
                outcomes.append(outcome)
                for hook in self._outcome_hooks:
                    hook(outcome)

        result = BatchResult(
            outcomes=tuple(outcomes),
            elapsed_seconds=time.perf_counter() - start_time,
        )
        LOGGER.info(
            "batch_settled",
            extra={
                "succeeded": result.succeeded,
                "failed": result.failed,
                "elapsed_s": round(result.elapsed_seconds, 3),
            },
        )
        return result

    @staticmethod
    def _settle(identifier: str, future) -> LabelResult:
        try:
            return future.result()
        except Exception as e:
            LOGGER.error(
                "label_task_crashed",
                extra={"identifier": identifier, "error": str(e), "error_type": type(e).__name__},
            )
            return LabelFailure(identifier=identifier, message=str(e), error_type=type(e).__name__)
