"""
Query pipeline: assistant lookup, per-query threads, run polling and the
ReplyPipeline that chains them.
"""
from .pipeline import ReplyPipeline, ReplyResult
from .runs import CancelToken, PollPolicy, RunOrchestrator

__all__ = ["CancelToken", "PollPolicy", "ReplyPipeline", "ReplyResult", "RunOrchestrator"]
