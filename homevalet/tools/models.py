"""
HomeValet Tool Models - Data structures for device-control function calling
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ParameterType(str, Enum):
    """Primitive parameter types understood by the validator"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class ValidationErrorKind(str, Enum):
    """Why a tool call failed validation"""
    UNKNOWN_TOOL = "unknown_tool"
    MISSING_PARAMETER = "missing_parameter"
    INVALID_TYPE = "invalid_type"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class ParameterSpec:
    """
    One named parameter of a tool.

    Attributes:
        name: Parameter name as sent by the model
        type: Primitive type
        description: Human description advertised to the model
        required: Whether the call is invalid without it
        minimum: Inclusive lower bound (numbers only)
        maximum: Inclusive upper bound (numbers only)
    """
    name: str
    type: ParameterType
    description: str = ""
    required: bool = False
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def is_bounded(self) -> bool:
        return self.minimum is not None or self.maximum is not None

    def to_json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type.value}
        if self.description:
            schema["description"] = self.description
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


@dataclass(frozen=True)
class ParameterSchema:
    """Ordered collection of parameters for a single tool"""
    parameters: Tuple[ParameterSpec, ...] = ()

    @property
    def required(self) -> List[str]:
        """Names of required parameters, in declaration order"""
        return [p.name for p in self.parameters if p.required]

    def get(self, name: str) -> Optional[ParameterSpec]:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None

    def to_json_schema(self) -> Dict[str, Any]:
        """Project to the JSON Schema object sent to the completion service"""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
        }
        required = self.required
        if required:
            schema["required"] = required
        return schema


@dataclass(frozen=True)
class ToolDefinition:
    """
    A callable device-control operation

    Attributes:
        name: Unique tool name
        description: What the tool does, shown to the model and in the prompt
        parameters: Parameter schema used for both advertising and validation
    """
    name: str
    description: str
    parameters: ParameterSchema = field(default_factory=ParameterSchema)

    def to_function_schema(self) -> Dict[str, Any]:
        """OpenAI function-calling representation"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters.to_json_schema(),
            },
        }


@dataclass(frozen=True)
class ToolCallRequest:
    """
    A fully assembled tool call from the model

    Attributes:
        index: Position of the call within the streamed response
        name: Tool name
        arguments: Parsed arguments dict
        call_id: Call ID assigned by the completion service, if any
    """
    index: int
    name: str
    arguments: Dict[str, Any]
    call_id: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a tool call against its schema"""
    valid: bool
    error: Optional[str] = None
    kind: Optional[ValidationErrorKind] = None
    parameter: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(
        cls,
        kind: ValidationErrorKind,
        error: str,
        parameter: Optional[str] = None,
    ) -> "ValidationResult":
        return cls(valid=False, error=error, kind=kind, parameter=parameter)


@dataclass
class ExecutionOutcome:
    """
    Result of executing one tool call

    Attributes:
        success: Whether the device action happened
        message: Human-readable confirmation or failure notice
        error: Diagnostic error text on failure
        data: Optional structured detail (e.g. affected device ids)
    """
    success: bool
    message: str
    error: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.error is not None:
            result["error"] = self.error
        if self.data is not None:
            result["data"] = self.data
        return result
