"""Function specification models.

FunctionSpecification, Parameters and Property describe a callable function
the way the completion service expects it in the ``functions`` array of a
request. All three are frozen Pydantic models that validate their structure
on construction and raise SchemaError (not pydantic.ValidationError) for
schema violations.

Deserialization from external JSON-Schema-shaped documents ignores unknown
keys so that newer schema features do not break older clients.
"""

from __future__ import annotations

import json
import logging
import types
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

from chatfn.exceptions import SchemaError

logger = logging.getLogger(__name__)

# JSON Schema primitive type name -> accepted Python types.
# bool is excluded from number/integer explicitly in _matches_type().
_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "array": (list, tuple),
    "object": (dict,),
    "null": (type(None),),
}


class Property(BaseModel):
    """A single named parameter of a function.

    Attributes:
        type: JSON Schema type name (e.g. "string", "integer").
        description: Optional human-readable description.
        enum: Optional closed set of allowed string values.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    description: str | None = None
    enum: tuple[str, ...] | None = None

    @field_validator("type")
    @classmethod
    def _type_not_empty(cls, value: str) -> str:
        if not value:
            raise SchemaError("Property type must not be empty")
        return value


class Parameters(BaseModel):
    """Top-level parameter schema of a function (always an object).

    ``properties`` is exposed as a read-only mapping, and instances are
    hashable like the other frozen models.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = "object"
    properties: Mapping[str, Property] = Field(default_factory=dict, validate_default=True)
    required: tuple[str, ...] = ()

    @field_validator("properties", mode="after")
    @classmethod
    def _freeze_properties(cls, value: Mapping[str, Property]) -> Mapping[str, Property]:
        return types.MappingProxyType(dict(value))

    @field_serializer("properties", mode="wrap")
    def _serialize_properties(self, value, handler):
        return handler(dict(value))

    def __hash__(self) -> int:
        return hash((self.type, tuple(self.properties.items()), self.required))

    @model_validator(mode="after")
    def _check_structure(self) -> Parameters:
        if self.type != "object":
            raise SchemaError(
                f"Top-level parameters type must be 'object', got '{self.type}'"
            )
        missing = [name for name in self.required if name not in self.properties]
        if missing:
            raise SchemaError(
                f"Required parameter(s) not declared in properties: {', '.join(missing)}"
            )
        return self


class FunctionSpecification(BaseModel):
    """Caller-declared description of a function the model may request.

    Example::

        spec = FunctionSpecification(
            name="get_current_weather",
            description="Get the current weather in a given location",
            parameters=Parameters(
                properties={"location": Property(type="string")},
                required=("location",),
            ),
        )
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    description: str | None = None
    parameters: Parameters | None = None

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise SchemaError("Function name must not be empty")
        return value

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the request format, omitting absent optional fields."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> FunctionSpecification:
        """Build a specification from a JSON-Schema-shaped mapping.

        Unknown keys are ignored at every level.

        Raises:
            SchemaError: If ``name`` is missing or the document is malformed.
        """
        if not isinstance(doc, Mapping):
            raise SchemaError(
                f"Function specification must be an object, got {type(doc).__name__}"
            )
        if "name" not in doc:
            raise SchemaError("Function specification is missing required field 'name'")
        try:
            return cls.model_validate(dict(doc))
        except ValidationError as exc:
            raise SchemaError(
                f"Invalid function specification '{doc.get('name')}': {exc}"
            ) from exc

    @classmethod
    def from_json(cls, text: str) -> FunctionSpecification:
        """Parse a specification from a JSON string."""
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SchemaError(f"Function specification is not valid JSON: {exc}") from exc
        return cls.from_dict(doc)

    # ------------------------------------------------------------------
    # Argument checking
    # ------------------------------------------------------------------

    def check_arguments(self, arguments: Any) -> list[str]:
        """Check decoded call arguments against the declared parameters.

        This is a lightweight subset of JSON Schema validation: object
        shape, required names, primitive types and enums. Types outside
        that subset are accepted as-is.

        Returns:
            A list of human-readable problems; empty when the arguments conform.
        """
        if not isinstance(arguments, dict):
            return [f"arguments must be a JSON object, got {type(arguments).__name__}"]
        if self.parameters is None:
            return []

        problems: list[str] = []
        for name in self.parameters.required:
            if name not in arguments:
                problems.append(f"missing required argument '{name}'")

        for name, value in arguments.items():
            prop = self.parameters.properties.get(name)
            if prop is None:
                continue
            if not _matches_type(value, prop.type):
                problems.append(
                    f"argument '{name}' should be of type '{prop.type}', "
                    f"got {type(value).__name__}"
                )
            elif prop.enum is not None and value not in prop.enum:
                problems.append(
                    f"argument '{name}' must be one of {list(prop.enum)}, got {value!r}"
                )
        return problems


def _matches_type(value: Any, type_name: str) -> bool:
    accepted = _JSON_TYPES.get(type_name)
    if accepted is None:
        return True
    if type_name in ("number", "integer") and isinstance(value, bool):
        return False
    return isinstance(value, accepted)


def load_functions(path: str | Path) -> list[FunctionSpecification]:
    """Load function specifications from a JSON file.

    The file may hold a single specification object or a list of them.

    Raises:
        SchemaError: If the file is not valid JSON or any entry is malformed.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaError(f"{path}: not valid JSON: {exc}") from exc

    if isinstance(doc, list):
        specs = [FunctionSpecification.from_dict(entry) for entry in doc]
    else:
        specs = [FunctionSpecification.from_dict(doc)]
    logger.debug("Loaded %d function specification(s) from %s", len(specs), path)
    return specs
