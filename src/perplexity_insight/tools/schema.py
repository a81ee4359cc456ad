"""Declarative parameter schemas for tools.

A :class:`ParameterSchema` is the single source of truth for a tool's
arguments: it renders the JSON Schema advertised by ``tools/list`` and it
validates (and fills defaults into) the arguments of ``tools/call``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

from perplexity_insight.errors import InvalidParamsError

ParameterType = Literal["string", "number", "integer", "boolean"]

_PYTHON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
}


class ParameterSpec(BaseModel):
    """One named argument of a tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: ParameterType
    description: str = ""
    required: bool = False
    enum: tuple[Any, ...] | None = None
    default: Any = None

    @model_validator(mode="after")
    def _check_consistency(self) -> ParameterSpec:
        if self.required and self.default is not None:
            msg = f"required parameter '{self.name}' cannot declare a default"
            raise ValueError(msg)
        if self.default is not None:
            try:
                self.check_value(self.default)
            except InvalidParamsError as exc:
                msg = f"invalid default: {exc.detail}"
                raise ValueError(msg) from exc
        return self

    def check_value(self, value: Any) -> None:
        """Raise :class:`InvalidParamsError` if *value* does not fit this parameter."""
        expected = _PYTHON_TYPES[self.type]
        # bool is an int subclass; only "boolean" accepts it.
        if isinstance(value, bool) and self.type != "boolean":
            raise InvalidParamsError(f"'{self.name}' must be a {self.type}")
        if not isinstance(value, expected):
            raise InvalidParamsError(f"'{self.name}' must be a {self.type}")
        if self.enum is not None and value not in self.enum:
            allowed = ", ".join(str(v) for v in self.enum)
            raise InvalidParamsError(f"'{self.name}' must be one of: {allowed}")

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        return schema


class ParameterSchema(BaseModel):
    """The ordered set of parameters a tool accepts."""

    model_config = ConfigDict(frozen=True)

    parameters: tuple[ParameterSpec, ...] = ()

    @model_validator(mode="after")
    def _unique_names(self) -> ParameterSchema:
        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            msg = "parameter names must be unique"
            raise ValueError(msg)
        return self

    @property
    def required(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def to_json_schema(self) -> dict[str, Any]:
        """Render as a JSON Schema ``object`` (the ``inputSchema`` of ``tools/list``)."""
        return {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
            "required": self.required,
        }

    def validate_arguments(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Check *arguments* and return them with defaults filled in.

        Unknown keys are ignored.  ``null`` counts as absent.

        Raises:
            InvalidParamsError: A required argument is missing or a value has
                the wrong type or falls outside its enumeration.
        """
        values: dict[str, Any] = {}
        for spec in self.parameters:
            value = arguments.get(spec.name)
            if value is None:
                if spec.required:
                    raise InvalidParamsError(f"missing required argument '{spec.name}'")
                values[spec.name] = spec.default
                continue
            spec.check_value(value)
            values[spec.name] = value
        return values
