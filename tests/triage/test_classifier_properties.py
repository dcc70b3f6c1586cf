"""Property-based tests for strict classification parsing.

Uses Hypothesis to verify that the classifier either returns exactly the
analysis the backend described, or the fallback analysis, and never
anything in between:
- Every well-formed response is accepted unchanged
- Any severity outside the four levels is rejected
- Any confidence outside [0, 100] is rejected
- A fallback always carries the request's issue number
"""

import asyncio
import json
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

from hypothesis import given, strategies as st
from langchain_core.messages import AIMessage

from src.component_triage.classifier.agent import IssueClassifier
from src.component_triage.classifier.models import (
    ClassificationRequest,
    SeverityLevel,
    is_critical_item,
    is_high_priority_item,
)


SEVERITY_VALUES = [level.value for level in SeverityLevel]


def run_async(coro):
    return asyncio.run(coro)


# =============================================================================
# Hypothesis Strategies
# =============================================================================


@st.composite
def valid_payload(draw: st.DrawFn) -> Dict[str, Any]:
    """Generate a response object that passes strict validation."""
    return {
        "issue_id": draw(st.integers(min_value=1, max_value=100000)),
        "is_critical": draw(st.booleans()),
        "severity_level": draw(st.sampled_from(SEVERITY_VALUES)),
        "reasoning": draw(st.text(max_size=200)),
        "affected_functionality": draw(st.lists(st.text(max_size=30), max_size=5)),
        "impact_description": draw(st.text(max_size=200)),
        "confidence_score": draw(
            st.floats(min_value=0, max_value=100, allow_nan=False, allow_infinity=False)
        ),
    }


@st.composite
def invalid_severity(draw: st.DrawFn) -> str:
    """Generate a severity string outside the four levels."""
    return draw(st.text(max_size=20).filter(lambda value: value not in SEVERITY_VALUES))


@st.composite
def out_of_range_confidence(draw: st.DrawFn) -> float:
    """Generate a confidence score outside [0, 100]."""
    return draw(
        st.one_of(
            st.floats(min_value=100.001, max_value=1e9, allow_nan=False),
            st.floats(min_value=-1e9, max_value=-0.001, allow_nan=False),
        )
    )


def _classify(payload_text: str, number: int = 42):
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=AIMessage(content=payload_text))
    classifier = IssueClassifier(api_key="sk-test", llm=llm)
    request = ClassificationRequest(
        component_name="button",
        issue_title="Button issue",
        issue_url=f"https://github.com/shadcn-ui/ui/issues/{number}",
    )
    return run_async(classifier.classify(request))


# =============================================================================
# Properties
# =============================================================================


@given(payload=valid_payload())
def test_valid_response_is_accepted_unchanged(payload):
    analysis = _classify(json.dumps(payload))

    assert analysis.model_dump(mode="json") == payload


@given(payload=valid_payload(), severity=invalid_severity())
def test_unknown_severity_yields_fallback(payload, severity):
    payload["severity_level"] = severity

    analysis = _classify(json.dumps(payload), number=7)

    assert analysis.is_fallback
    assert analysis.issue_id == 7
    assert analysis.severity_level == SeverityLevel.MEDIUM


@given(payload=valid_payload(), confidence=out_of_range_confidence())
def test_out_of_range_confidence_yields_fallback(payload, confidence):
    payload["confidence_score"] = confidence

    analysis = _classify(json.dumps(payload), number=9)

    assert analysis.is_fallback
    assert analysis.issue_id == 9
    assert analysis.confidence_score == 0


@given(payload=valid_payload())
def test_critical_and_high_priority_are_disjoint(payload):
    analysis = _classify(json.dumps(payload))

    assert not (is_critical_item(analysis) and is_high_priority_item(analysis))
    if analysis.is_critical:
        assert is_critical_item(analysis)
