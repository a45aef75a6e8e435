"""Shared, concurrency-limited submission of commands to the store."""

from .queue import CompletionCallback, SubmissionQueue

__all__ = ["CompletionCallback", "SubmissionQueue"]
