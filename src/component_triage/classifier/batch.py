"""Batched issue classification.

Drives the IssueClassifier over an ordered list of requests in fixed-size
chunks. All requests of a chunk run concurrently and the chunk settles
completely before the next one starts, after a fixed pause. Output order
always matches input order.
"""

import asyncio
from typing import List, Protocol, Sequence

import structlog

from src.component_triage.classifier.models import ClassificationRequest, IssueAnalysis


logger = structlog.get_logger()


class Classifier(Protocol):
    """Anything that classifies a single request."""

    async def classify(self, request: ClassificationRequest) -> IssueAnalysis:
        ...


class BatchClassifier:
    """Classifies requests in chunks with a pause between chunks.

    A failing call never cancels its siblings: exceptions are collected
    per slot and replaced by the fallback analysis. Failed calls are not
    retried.

    Attributes:
        classifier: Single-request classifier.
        batch_size: Number of concurrent requests per chunk.
        batch_delay_seconds: Pause between consecutive chunks.
    """

    def __init__(
        self,
        classifier: Classifier,
        batch_size: int = 5,
        batch_delay_seconds: float = 1.0,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.classifier = classifier
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds

    async def run_batch(self, requests: Sequence[ClassificationRequest]) -> List[IssueAnalysis]:
        """Classify all requests, preserving order and length.

        Args:
            requests: Requests in fetch order.

        Returns:
            One analysis per request; ``result[i]`` belongs to ``requests[i]``.
        """
        results: List[IssueAnalysis] = []
        total_batches = (len(requests) + self.batch_size - 1) // self.batch_size

        for batch_index, start in enumerate(range(0, len(requests), self.batch_size)):
            chunk = requests[start:start + self.batch_size]

            logger.info(
                "Analyzing batch",
                batch=batch_index + 1,
                total_batches=total_batches,
                batch_size=len(chunk),
            )

            settled = await asyncio.gather(
                *(self.classifier.classify(request) for request in chunk),
                return_exceptions=True,
            )

            for request, outcome in zip(chunk, settled):
                if isinstance(outcome, BaseException):
                    logger.error(
                        "Failed to analyze issue",
                        issue_url=request.issue_url,
                        error=str(outcome),
                        error_type=type(outcome).__name__,
                    )
                    results.append(IssueAnalysis.fallback(request.issue_id, f"Analysis failed: {outcome}"))
                else:
                    results.append(outcome)

            if start + self.batch_size < len(requests):
                await asyncio.sleep(self.batch_delay_seconds)

        return results
