"""LLM-based severity classifier for component issues.

This module implements the IssueClassifier that uses an LLM to assess how
severely a GitHub issue affects basic usage of a UI component. For every
issue it extracts:
- Whether the issue blocks basic component usage
- A severity level (low, medium, high, critical)
- Reasoning, affected functionality and user impact
- A confidence score (0-100)

The classifier also produces the component-level summary that closes a
report. It uses LangChain's ChatOpenAI client, so any OpenAI-compatible
endpoint can serve as the classification backend.
"""

from typing import Optional, Sequence

import structlog
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from src.component_triage.classifier.models import (
    AnalyzedIssue,
    ClassificationRequest,
    IssueAnalysis,
    ReportSummary,
    is_critical_item,
    is_high_priority_item,
)
from src.component_triage.errors import TriageError


logger = structlog.get_logger()


def build_classification_system_prompt(component_name: str) -> str:
    """Build the system instruction carrying the severity rubric."""
    return f"""You are an expert frontend developer and component library maintainer. Your task is to analyze GitHub issues related to the {component_name} shadcn/ui component only and determine their criticality for basic component usage and performance.

A CRITICAL issue is one that:
- Prevents the component from rendering or functioning at all
- Causes the component to crash the application
- Makes the component completely unusable for its primary purpose
- Causes severe performance issues that make the component unusable
- Introduces security vulnerabilities
- Breaks core accessibility features that make the component unusable for users with disabilities

A HIGH priority issue is one that:
- Significantly impacts the component's functionality but doesn't prevent basic usage
- Causes noticeable performance degradation
- Affects important but not core features
- Has workarounds but they are complex or hacky

A MEDIUM priority issue is one that:
- Affects edge cases or less common use cases
- Has minor performance impacts
- Affects styling or visual appearance in non-breaking ways
- Has simple workarounds

A LOW priority issue is one that:
- Affects very specific edge cases
- Is more of an enhancement than a bug
- Has minimal impact on functionality
- Is primarily cosmetic

You MUST respond with a single valid JSON object containing exactly the fields requested."""


def build_classification_prompt(request: ClassificationRequest) -> str:
    """Build the user prompt for one issue.

    Args:
        request: The issue fields to embed.

    Returns:
        Formatted prompt string for the LLM.
    """
    labels_str = ", ".join(request.issue_labels) if request.issue_labels else "None"
    body_content = request.issue_body if request.issue_body else "No description provided"

    return f"""Analyze this GitHub issue for the {request.component_name} component:

**Issue Title:** {request.issue_title}

**Issue URL:** {request.issue_url}

**Labels:** {labels_str}

**Issue Description:**
{body_content}

Please analyze this issue and respond with a JSON object containing:
{{
  "issue_id": number, // Extract from URL
  "is_critical": boolean, // true if this prevents basic component usage
  "severity_level": "low" | "medium" | "high" | "critical",
  "reasoning": "string", // Detailed explanation of your assessment
  "affected_functionality": ["array", "of", "affected", "features"],
  "impact_description": "string", // How this affects users
  "confidence_score": number // 0-100, how confident you are in this assessment
}}

Focus on whether this issue prevents the component from working for its intended purpose or causes significant usability problems."""


SUMMARY_SYSTEM_PROMPT = (
    "You are an expert frontend developer providing actionable insights about "
    "component issues. Be concise and practical. You MUST respond with a single "
    "valid JSON object."
)


def build_summary_prompt(component_name: str, analyzed_issues: Sequence[AnalyzedIssue]) -> str:
    """Build the prompt requesting the component-level rollup."""
    critical = [item for item in analyzed_issues if is_critical_item(item.analysis)]
    high = [item for item in analyzed_issues if is_high_priority_item(item.analysis)]

    def _lines(items: Sequence[AnalyzedIssue]) -> str:
        return "\n".join(
            f"- {item.github_issue.title}: {item.analysis.reasoning}" for item in items
        )

    return f"""
Analyze the following component issue analyses for the {component_name} component and provide a summary:

Critical Issues ({len(critical)}):
{_lines(critical)}

High Priority Issues ({len(high)}):
{_lines(high)}

Please provide:
1. most_critical_issues: Array of the top 3-5 most critical issue titles/descriptions
2. common_problems: Array of common problem patterns you notice
3. recommended_actions: Array of recommended actions for developers using this component

Respond with a JSON object with exactly these three array fields."""


def strip_code_fences(response_text: str) -> str:
    """Remove a Markdown code block wrapped around a JSON response.

    Args:
        response_text: Raw text response from the LLM.

    Returns:
        The text inside the code block, or the stripped text unchanged.
    """
    text = response_text.strip()

    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]

    if text.endswith("```"):
        text = text[:-3]

    return text.strip()


def describe_validation_error(error: ValidationError) -> str:
    """Summarize a pydantic ValidationError on one line."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "response"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


class ClassificationError(TriageError):
    """Raised when an LLM response cannot be turned into a valid result."""


class IssueClassifier:
    """LLM-based severity classifier for component issues.

    ``classify`` never raises: transport failures and invalid responses are
    logged and replaced by ``IssueAnalysis.fallback``. ``summarize`` raises
    ClassificationError so the caller can pick its own fallback.

    Attributes:
        api_key: API key for the classification backend.
        model_name: Name of the chat model.
        base_url: Optional OpenAI-compatible endpoint URL.
        timeout: Request timeout in seconds.
        temperature: Sampling temperature for issue classification.
        summary_temperature: Sampling temperature for the summary rollup.

    Example:
        >>> classifier = IssueClassifier(api_key="sk-...", model_name="gpt-4o-mini")
        >>> analysis = await classifier.classify(request)
        >>> analysis.severity_level
        <SeverityLevel.HIGH: 'high'>
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4-turbo-preview",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        temperature: float = 0.1,
        summary_temperature: float = 0.2,
        llm: Optional[ChatOpenAI] = None,
    ):
        """Initialize the issue classifier.

        Args:
            api_key: API key for the classification backend.
            model_name: Name of the chat model.
            base_url: Optional OpenAI-compatible endpoint URL.
            timeout: Request timeout in seconds.
            temperature: Sampling temperature (lower = more deterministic).
            summary_temperature: Sampling temperature for summaries.
            llm: Pre-built chat model; built lazily from the other arguments when None.
        """
        self.api_key = api_key
        self.model_name = model_name
        self.base_url = base_url
        self.timeout = timeout
        self.temperature = temperature
        self.summary_temperature = summary_temperature
        self._llm = llm

    @property
    def llm(self) -> ChatOpenAI:
        """Get the LLM client, creating it if necessary."""
        if self._llm is None:
            self._llm = ChatOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                model=self.model_name,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._llm

    async def _complete_json(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        """Send one chat completion in JSON mode and return the text content.

        Raises:
            ClassificationError: If the call fails or returns no text.
        """
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]

        try:
            response = await self.llm.ainvoke(
                messages,
                temperature=temperature,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise ClassificationError(f"LLM invocation failed: {e}", cause=e)

        content = response.content
        if not isinstance(content, str):
            raise ClassificationError(f"Unexpected response type: {type(content).__name__}")
        if not content.strip():
            raise ClassificationError("No response content from LLM")
        return content

    async def classify(self, request: ClassificationRequest) -> IssueAnalysis:
        """Classify one issue, substituting a fallback on any failure.

        Args:
            request: The issue to classify.

        Returns:
            The validated analysis, or ``IssueAnalysis.fallback`` naming
            the failure cause.
        """
        logger.debug(
            "Classifying issue",
            issue_url=request.issue_url,
            title=request.issue_title[:100],
            body_length=len(request.issue_body),
            labels=request.issue_labels,
        )

        try:
            analysis = await self._perform_classification(request)
        except Exception as e:
            logger.error(
                "Issue classification failed",
                issue_url=request.issue_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return IssueAnalysis.fallback(request.issue_id, str(e))

        logger.debug(
            "Issue classified successfully",
            issue_url=request.issue_url,
            severity_level=analysis.severity_level.value,
            is_critical=analysis.is_critical,
            confidence_score=analysis.confidence_score,
        )
        return analysis

    async def _perform_classification(self, request: ClassificationRequest) -> IssueAnalysis:
        """Perform the LLM call and strict validation.

        Raises:
            ClassificationError: If the call, parsing or validation fails.
        """
        response_text = await self._complete_json(
            build_classification_system_prompt(request.component_name),
            build_classification_prompt(request),
            self.temperature,
        )

        try:
            return IssueAnalysis.model_validate_json(strip_code_fences(response_text))
        except ValidationError as e:
            logger.warning(
                "Invalid classification response",
                issue_url=request.issue_url,
                response_preview=response_text[:200],
            )
            raise ClassificationError(
                f"Response validation failed: {describe_validation_error(e)}",
                cause=e,
            )

    async def summarize(
        self,
        component_name: str,
        analyzed_issues: Sequence[AnalyzedIssue],
    ) -> ReportSummary:
        """Request the component-level summary of the classified issues.

        Args:
            component_name: Name of the analyzed component.
            analyzed_issues: Issues paired with their analyses.

        Returns:
            The validated summary.

        Raises:
            ClassificationError: If the call, parsing or validation fails.
        """
        response_text = await self._complete_json(
            SUMMARY_SYSTEM_PROMPT,
            build_summary_prompt(component_name, analyzed_issues),
            self.summary_temperature,
        )

        try:
            return ReportSummary.model_validate_json(strip_code_fences(response_text))
        except ValidationError as e:
            raise ClassificationError(
                f"Summary validation failed: {describe_validation_error(e)}",
                cause=e,
            )
