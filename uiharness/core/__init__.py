"""Synchronization and interaction core."""

from uiharness.core.condition import Condition, Fatal, NotReady, Ready
from uiharness.core.errors import (
    ConditionTimeout,
    DuplicateBinding,
    FrameworkError,
    InteractionFailed,
    NoActiveSession,
    OptionNotFound,
    SessionLost,
)
from uiharness.core.interactions import Interactions
from uiharness.core.registry import ExecutionContext, ExecutionContextRegistry, execution_key
from uiharness.core.wait import WaitEngine

__all__ = [
    "Condition",
    "Ready",
    "NotReady",
    "Fatal",
    "ConditionTimeout",
    "DuplicateBinding",
    "FrameworkError",
    "InteractionFailed",
    "NoActiveSession",
    "OptionNotFound",
    "SessionLost",
    "Interactions",
    "ExecutionContext",
    "ExecutionContextRegistry",
    "execution_key",
    "WaitEngine",
]
