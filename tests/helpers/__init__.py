"""Test helper utilities for comment notifier tests."""

from .inline_scheduler import DeferredScheduler, InlineScheduler
from .wiki import RecordingMailListener, sample_wiki

__all__ = ["InlineScheduler", "DeferredScheduler", "RecordingMailListener", "sample_wiki"]
