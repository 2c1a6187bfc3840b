"""
HomeValet Tools - Device-control function calling

Provides:
- ToolDefinition / ParameterSchema: Declarative tool catalog entries
- ToolRegistry: Catalog lookup and parameter validation
- ToolExecutor: Validate, resolve devices and dispatch to Actions

Usage:
    from homevalet.tools import ToolRegistry, ToolExecutor

    registry = ToolRegistry()
    executor = ToolExecutor(actions=actions, environment=environment, registry=registry)
    outcome = await executor.execute("toggleLight", {"roomId": "living"})
"""

from .models import (
    ParameterType,
    ParameterSpec,
    ParameterSchema,
    ToolDefinition,
    ToolCallRequest,
    ValidationErrorKind,
    ValidationResult,
    ExecutionOutcome,
)
from .catalog import DEFAULT_TOOLS
from .registry import ToolRegistry
from .executor import (
    ToolExecutor,
    DeviceResolutionError,
    ResolutionFailure,
    ActionDispatchError,
)

__all__ = [
    # Models
    "ParameterType",
    "ParameterSpec",
    "ParameterSchema",
    "ToolDefinition",
    "ToolCallRequest",
    "ValidationErrorKind",
    "ValidationResult",
    "ExecutionOutcome",
    # Catalog / registry
    "DEFAULT_TOOLS",
    "ToolRegistry",
    # Executor
    "ToolExecutor",
    "DeviceResolutionError",
    "ResolutionFailure",
    "ActionDispatchError",
]
