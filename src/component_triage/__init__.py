"""Issue triage for UI component libraries.

This package analyzes GitHub issues reported against a UI component and
classifies their severity with an LLM, providing:
- Issue search scoped to a component library repository
- Per-issue severity classification with deterministic fallbacks
- Batched classification with a bounded concurrency per chunk
- Aggregated Markdown and JSON reports
"""

__version__ = "1.0.0"
