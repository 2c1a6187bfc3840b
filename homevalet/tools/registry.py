"""
HomeValet Tool Registry - Catalog lookup and parameter validation
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .catalog import DEFAULT_TOOLS
from .models import (
    ParameterSpec,
    ParameterType,
    ToolDefinition,
    ValidationErrorKind,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def _format_bound(value: float) -> str:
    return f"{value:g}"


def _matches_type(value: Any, param_type: ParameterType) -> bool:
    # bool is a subclass of int, so it has to be excluded from numbers explicitly
    if param_type == ParameterType.BOOLEAN:
        return isinstance(value, bool)
    if param_type == ParameterType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return not math.isnan(value)
    return isinstance(value, str)


class ToolRegistry:
    """
    Static catalog of device-control tools.

    The same ToolDefinition objects drive the function-calling schema sent
    to the completion service, the capability list in the system prompt and
    parameter validation, so the three can never drift apart.

    Usage:
        registry = ToolRegistry()
        result = registry.validate("setBrightness", {"value": 120})
        if not result.valid:
            print(result.error)   # Parameter 'value' must be between 0 and 100
    """

    def __init__(self, tools: Optional[Iterable[ToolDefinition]] = None):
        definitions = tuple(DEFAULT_TOOLS if tools is None else tools)

        self._tools: Dict[str, ToolDefinition] = {}
        for tool in definitions:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool
        self._ordered: Tuple[ToolDefinition, ...] = definitions

    def list_definitions(self) -> Tuple[ToolDefinition, ...]:
        """All tools in declaration order"""
        return self._ordered

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def get_tools_schema(self) -> List[Dict[str, Any]]:
        """Tools in OpenAI function-calling format"""
        return [tool.to_function_schema() for tool in self._ordered]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._ordered)

    def validate(self, name: str, arguments: Optional[Mapping[str, Any]]) -> ValidationResult:
        """
        Check a tool call against its declared schema.

        Checks, in order: the tool exists, every required parameter is present
        and not None, supplied values have the declared primitive type, and
        numeric values fall inside declared bounds. Arguments not declared in
        the schema are ignored.

        Args:
            name: Tool name
            arguments: Call arguments

        Returns:
            ValidationResult
        """
        tool = self._tools.get(name)
        if tool is None:
            return ValidationResult.fail(
                ValidationErrorKind.UNKNOWN_TOOL, f"Unknown tool: {name}"
            )

        arguments = arguments or {}
        schema = tool.parameters

        for param in schema.required:
            if arguments.get(param) is None:
                return ValidationResult.fail(
                    ValidationErrorKind.MISSING_PARAMETER,
                    f"Missing required parameter: {param}",
                    parameter=param,
                )

        for spec in schema.parameters:
            value = arguments.get(spec.name)
            if value is None:
                continue
            result = self._check_value(spec, value)
            if not result.valid:
                return result

        return ValidationResult.ok()

    @staticmethod
    def _check_value(spec: ParameterSpec, value: Any) -> ValidationResult:
        if not _matches_type(value, spec.type):
            return ValidationResult.fail(
                ValidationErrorKind.INVALID_TYPE,
                f"Parameter '{spec.name}' must be a {spec.type.value}",
                parameter=spec.name,
            )

        if spec.type == ParameterType.NUMBER and spec.is_bounded:
            too_low = spec.minimum is not None and value < spec.minimum
            too_high = spec.maximum is not None and value > spec.maximum
            if too_low or too_high:
                if spec.minimum is not None and spec.maximum is not None:
                    bounds = f"between {_format_bound(spec.minimum)} and {_format_bound(spec.maximum)}"
                elif spec.minimum is not None:
                    bounds = f"at least {_format_bound(spec.minimum)}"
                else:
                    bounds = f"at most {_format_bound(spec.maximum)}"
                return ValidationResult.fail(
                    ValidationErrorKind.OUT_OF_RANGE,
                    f"Parameter '{spec.name}' must be {bounds}",
                    parameter=spec.name,
                )

        return ValidationResult.ok()
