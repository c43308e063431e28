"""Domain models related to AI interactions.

Includes the structured response returned by provider clients and the
response schema declaration each resolver sends with its prompt.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .common import TokenUsage
from .errors import SchemaValidationError

# Primitive field types understood by the upstream schema declaration
FIELD_STRING = "string"
FIELD_STRING_ARRAY = "array"  # array of strings

_SUPPORTED_FIELD_TYPES = (FIELD_STRING, FIELD_STRING_ARRAY)


@dataclass
class StructuredAIResponse:
    """Structured response from an AI model, including metadata."""
    text: Optional[str]
    token_usage: Optional[TokenUsage] = None
    model_name: Optional[str] = None # Which model generated the response
    latency_ms: Optional[float] = None # Time taken for the API call


@dataclass(frozen=True)
class ResponseSchema:
    """Expected shape of a structured upstream response.

    Attributes:
        name: Identifier sent to providers that require a named schema.
        properties: Mapping of field name to field type (FIELD_STRING or
            FIELD_STRING_ARRAY).
        required: Fields that must be present in every response.
    """
    name: str
    properties: Dict[str, str]
    required: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        for field_name, field_type in self.properties.items():
            if field_type not in _SUPPORTED_FIELD_TYPES:
                raise ValueError(f"Unsupported type '{field_type}' for schema field '{field_name}'")
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            raise ValueError(f"Required fields not declared in properties: {unknown}")

    def to_json_schema(self) -> Dict[str, Any]:
        """Renders the declaration as a JSON Schema object."""
        properties: Dict[str, Any] = {}
        for field_name, field_type in self.properties.items():
            if field_type == FIELD_STRING_ARRAY:
                properties[field_name] = {"type": "array", "items": {"type": "string"}}
            else:
                properties[field_name] = {"type": "string"}
        return {
            "type": "object",
            "properties": properties,
            "required": list(self.required),
            "additionalProperties": False,
        }

    def validate(self, payload: Any) -> Dict[str, Any]:
        """Checks a parsed payload against the schema.

        Returns:
            A dict holding only the declared fields.

        Raises:
            SchemaValidationError: If the payload is not an object, a required
                field is missing, or a field has the wrong type.
        """
        if not isinstance(payload, dict):
            raise SchemaValidationError(f"{self.name}: expected a JSON object, got {type(payload).__name__}")

        missing = [name for name in self.required if name not in payload]
        if missing:
            raise SchemaValidationError(f"{self.name}: missing required fields {missing}")

        validated: Dict[str, Any] = {}
        for field_name, field_type in self.properties.items():
            if field_name not in payload:
                continue
            value = payload[field_name]
            if field_type == FIELD_STRING_ARRAY:
                if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                    raise SchemaValidationError(f"{self.name}: field '{field_name}' must be a list of strings")
                validated[field_name] = list(value)
            else:
                if not isinstance(value, str):
                    raise SchemaValidationError(f"{self.name}: field '{field_name}' must be a string")
                validated[field_name] = value
        return validated
