"""LLM-based severity classification of component issues.

This module classifies GitHub issues using an LLM to determine:
- Whether the issue blocks basic component usage
- Severity level (low, medium, high, critical)
- Reasoning, affected functionality and user impact
- Confidence score (0-100)

Failed classifications are replaced by a deterministic fallback analysis,
and BatchClassifier runs the classifier over many issues in chunks.
"""

from src.component_triage.classifier.agent import ClassificationError, IssueClassifier
from src.component_triage.classifier.batch import BatchClassifier
from src.component_triage.classifier.models import (
    ClassificationRequest,
    IssueAnalysis,
    SeverityLevel,
)

__all__ = [
    "BatchClassifier",
    "ClassificationError",
    "ClassificationRequest",
    "IssueAnalysis",
    "IssueClassifier",
    "SeverityLevel",
]
