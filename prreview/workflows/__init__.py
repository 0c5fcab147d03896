"""Workflow modules for the review session."""

from prreview.workflows.review import (
    ReviewState,
    ReviewWorkflow,
    ReviewWorkflowError,
    RunContext,
    authenticate,
)

__all__ = [
    "ReviewState",
    "ReviewWorkflow",
    "ReviewWorkflowError",
    "RunContext",
    "authenticate",
]
