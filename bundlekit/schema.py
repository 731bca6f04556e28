"""Conversion of bundle plans into JSON Schema and form definitions."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from itertools import groupby
from typing import Any

from bundlekit.spec import ParameterDescriptor, Plan

log = logging.getLogger(__name__)

SCHEMA_URL = "http://json-schema.org/draft-04/schema"


class PrimitiveType(str, Enum):
    """JSON Schema primitive types."""

    NULL = "null"
    INTEGER = "integer"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"
    BOOLEAN = "boolean"
    NUMBER = "number"


_TYPE_NAMES = {
    "string": PrimitiveType.STRING,
    "enum": PrimitiveType.STRING,
    "int": PrimitiveType.INTEGER,
    "integer": PrimitiveType.INTEGER,
    "object": PrimitiveType.OBJECT,
    "array": PrimitiveType.ARRAY,
    "bool": PrimitiveType.BOOLEAN,
    "boolean": PrimitiveType.BOOLEAN,
    "number": PrimitiveType.NUMBER,
    "nil": PrimitiveType.NULL,
    "null": PrimitiveType.NULL,
}


def _to_json(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


@dataclass
class PropertySchema:
    """JSON Schema of a single parameter."""

    type: list[PrimitiveType]
    title: str = ""
    description: str = ""
    default: Any = None
    max_length: int | None = None
    min_length: int | None = None
    pattern: re.Pattern[str] | None = None
    multiple_of: float | None = None
    maximum: float | None = None
    minimum: float | None = None
    exclusive_maximum: bool = False
    exclusive_minimum: bool = False
    enum: list[Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON Schema form, leaving out unset keywords."""
        out: dict[str, Any] = {}
        if self.title:
            out["title"] = self.title
        if self.description:
            out["description"] = self.description
        if self.default is not None:
            out["default"] = self.default
        if self.type:
            names = [t.value for t in self.type]
            out["type"] = names[0] if len(names) == 1 else names
        optional = {
            "maxLength": self.max_length,
            "minLength": self.min_length,
            "pattern": self.pattern.pattern if self.pattern is not None else None,
            "multipleOf": self.multiple_of,
            "maximum": self.maximum,
            "minimum": self.minimum,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        if self.exclusive_maximum:
            out["exclusiveMaximum"] = True
        if self.exclusive_minimum:
            out["exclusiveMinimum"] = True
        if self.enum:
            out["enum"] = list(self.enum)
        return out


@dataclass
class ObjectSchema:
    """JSON Schema of a parameter object."""

    properties: dict[str, PropertySchema] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    schema_ref: str = SCHEMA_URL
    type: list[PrimitiveType] = field(default_factory=lambda: [PrimitiveType.OBJECT])

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON Schema form of the object."""
        names = [t.value for t in self.type]
        out: dict[str, Any] = {
            "$schema": self.schema_ref,
            "type": names[0] if len(names) == 1 else names,
        }
        if self.properties:
            out["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        if self.required:
            out["required"] = list(self.required)
        return out


@dataclass
class Schema:
    """Parameter schemas for instance create/update and binding create."""

    instance_create: ObjectSchema
    instance_update: ObjectSchema
    binding_create: ObjectSchema

    def to_dict(self) -> dict[str, Any]:
        """Return the broker-facing nested form."""
        return {
            "service_instance": {
                "create": {"parameters": self.instance_create.to_dict()},
                "update": {"parameters": self.instance_update.to_dict()},
            },
            "service_binding": {
                "create": {"parameters": self.binding_create.to_dict()},
            },
        }


@dataclass
class SchemaPlan:
    """A plan as presented to a service broker, with schemas."""

    id: str
    name: str
    description: str
    metadata: dict[str, Any] | None
    free: bool
    bindable: bool
    updates_to: list[str]
    schemas: Schema

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready form of the plan."""
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "free": self.free,
            "bindable": self.bindable,
            "schemas": self.schemas.to_dict(),
        }
        if self.metadata:
            out["metadata"] = _to_json(self.metadata)
        if self.updates_to:
            out["updates_to"] = list(self.updates_to)
        return out


@dataclass
class FormItem:
    """An entry of a form definition: a keyed field or a titled fieldset."""

    key: str = ""
    title: str = ""
    type: str = ""
    items: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out empty fields."""
        out: dict[str, Any] = {}
        if self.key:
            out["key"] = self.key
        if self.title:
            out["title"] = self.title
        if self.type:
            out["type"] = self.type
        if self.items:
            out["items"] = _to_json(self.items)
        return out


def convert_plans_to_schema(plans: list[Plan]) -> list[SchemaPlan]:
    """Convert bundle plans to broker plans carrying JSON schemas."""
    return [
        SchemaPlan(
            id=plan.id,
            name=plan.name,
            description=plan.description,
            metadata=extract_broker_plan_metadata(plan),
            free=plan.free,
            bindable=plan.bindable,
            updates_to=plan.updates_to,
            schemas=parameters_to_schema(plan),
        )
        for plan in plans
    ]


def plan_updatable(plans: list[Plan]) -> bool:
    """Return True when any plan can be updated to another plan."""
    return any(plan.updates_to for plan in plans)


def extract_broker_plan_metadata(plan: Plan) -> dict[str, Any] | None:
    """Copy the plan metadata and add the form definitions under 'schemas'."""
    if plan.metadata is None:
        metadata: dict[str, Any] = {}
    else:
        try:
            metadata = json.loads(json.dumps(plan.metadata))
        except (TypeError, ValueError):
            return plan.metadata

    metadata["schemas"] = {
        "service_instance": {
            "create": {"openshift_form_definition": create_form_definition(plan.parameters)},
            "update": {},
        },
        "service_binding": {
            "create": {"openshift_form_definition": create_form_definition(plan.bind_parameters)},
        },
    }
    return metadata


def _form_item(pd: ParameterDescriptor) -> str | FormItem:
    # A bare name stands for a field with no display type.
    if not pd.display_type:
        return pd.name
    return FormItem(key=pd.name, type=pd.display_type)


def create_form_definition(params: list[ParameterDescriptor] | None) -> list[Any]:
    """Build a form definition, gathering consecutive grouped params into fieldsets."""
    form: list[Any] = []
    for group, members in groupby(params or (), key=lambda p: p.display_group):
        if not group:
            form.extend(_form_item(p) for p in members)
        else:
            form.append(FormItem(title=group, type="fieldset", items=[_form_item(p) for p in members]))
    return form


def get_type(param_type: str) -> list[PrimitiveType]:
    """Map a bundle parameter type to JSON Schema types."""
    try:
        return [_TYPE_NAMES[param_type.lower()]]
    except KeyError:
        raise ValueError(f"Could not find the parameter type for: {param_type}") from None


def _set_string_validators(pd: ParameterDescriptor, prop: PropertySchema) -> None:
    if prop.type[0] is not PrimitiveType.STRING:
        return
    if pd.deprecated_maxlength > 0:
        prop.max_length = pd.deprecated_maxlength
    if pd.max_length > 0:
        prop.max_length = pd.max_length
    if pd.min_length > 0:
        prop.min_length = pd.min_length
    if pd.pattern:
        try:
            prop.pattern = re.compile(pd.pattern)
        except re.error as exc:
            log.warning("Invalid pattern: %s", exc)


def _set_number_validators(pd: ParameterDescriptor, prop: PropertySchema) -> None:
    if prop.type[0] not in (PrimitiveType.NUMBER, PrimitiveType.INTEGER):
        return
    if pd.multiple_of > 0:
        prop.multiple_of = float(pd.multiple_of)
    if pd.maximum is not None:
        prop.maximum = float(pd.maximum)
    if pd.minimum is not None:
        prop.minimum = float(pd.minimum)
    # Exclusive bounds reuse maximum/minimum with a boolean flag.
    if pd.exclusive_maximum is not None:
        prop.maximum = float(pd.exclusive_maximum)
        prop.exclusive_maximum = True
    if pd.exclusive_minimum is not None:
        prop.minimum = float(pd.exclusive_minimum)
        prop.exclusive_minimum = True


def _build_property(pd: ParameterDescriptor, types: list[PrimitiveType]) -> PropertySchema:
    prop = PropertySchema(
        type=types,
        title=pd.title,
        description=pd.description,
        default=pd.default,
    )
    _set_string_validators(pd, prop)
    _set_number_validators(pd, prop)
    if pd.enum:
        prop.enum = list(pd.enum)
    return prop


def _extract_properties(params: list[ParameterDescriptor]) -> dict[str, PropertySchema]:
    return {pd.name: _build_property(pd, get_type(pd.type)) for pd in params}


def _extract_required(params: list[ParameterDescriptor]) -> list[str]:
    return [pd.name for pd in params if pd.required]


def _extract_updatable(params: list[ParameterDescriptor]) -> dict[str, PropertySchema]:
    updatable: dict[str, PropertySchema] = {}
    for pd in params:
        types = get_type(pd.type)
        if pd.updatable:
            updatable[pd.name] = _build_property(pd, types)
    return updatable


def parameters_to_schema(plan: Plan) -> Schema:
    """Convert the plan's parameters into JSON Schemas."""
    create_properties = _extract_properties(plan.parameters)
    create_required = _extract_required(plan.parameters)
    bind_properties = _extract_properties(plan.bind_parameters)
    bind_required = _extract_required(plan.bind_parameters)
    updatable_properties = _extract_updatable(plan.parameters)
    updatable_required = [name for name in create_required if name in updatable_properties]

    return Schema(
        instance_create=ObjectSchema(properties=create_properties, required=create_required),
        instance_update=ObjectSchema(properties=updatable_properties, required=updatable_required),
        binding_create=ObjectSchema(properties=bind_properties, required=bind_required),
    )