"""Conversions between bundle types and their custom resource forms."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from bundlekit.crd.resources import (
    AsyncType,
    BundleBinding,
    BundleBindingSpec,
    BundleInstance,
    BundleInstanceSpec,
    BundleInstanceStatus,
    BundleSpec,
    CrdContext,
    CrdJobMethod,
    CrdParameter,
    CrdPlan,
    CrdState,
    LocalObjectReference,
)
from bundlekit.spec import (
    BindInstance,
    Context,
    JobMethod,
    ParameterDescriptor,
    Plan,
    ServiceInstance,
    Spec,
    State,
)

log = logging.getLogger(__name__)


class ConversionErrors(ValueError):
    """Several conversion failures reported together."""

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors))


_STATE_TO_CRD = {
    State.NOT_YET_STARTED: CrdState.NOT_YET_STARTED,
    State.IN_PROGRESS: CrdState.IN_PROGRESS,
    State.SUCCEEDED: CrdState.SUCCEEDED,
    State.FAILED: CrdState.FAILED,
}
_STATE_TO_APB = {crd: apb for apb, crd in _STATE_TO_CRD.items()}

_METHOD_TO_CRD = {
    JobMethod.PROVISION: CrdJobMethod.PROVISION,
    JobMethod.DEPROVISION: CrdJobMethod.DEPROVISION,
    JobMethod.BIND: CrdJobMethod.BIND,
    JobMethod.UNBIND: CrdJobMethod.UNBIND,
    JobMethod.UPDATE: CrdJobMethod.UPDATE,
}
_METHOD_TO_APB = {crd: apb for apb, crd in _METHOD_TO_CRD.items()}


def _normalize(value: Any) -> Any:
    # Integral floats are written without a fractional part.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def _dumps(value: Any) -> str:
    return json.dumps(_normalize(value), sort_keys=True, separators=(",", ":"), allow_nan=False)


def _loads_object(text: str, what: str) -> dict[str, Any]:
    value = json.loads(text, parse_int=float)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} is not a JSON object")
    return value


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return None


def _number(value: float | None) -> float | None:
    return None if value is None else float(value)


def _convert_all(items, convert) -> tuple[list, list[Exception]]:
    converted: list = []
    errors: list[Exception] = []
    for item in items:
        try:
            converted.append(convert(item))
        except (TypeError, ValueError) as exc:
            errors.append(exc)
    return converted, errors


def convert_spec_to_bundle(spec: Spec) -> BundleSpec:
    """Convert a bundle spec to its custom resource form."""
    try:
        metadata = _dumps(spec.metadata)
    except (TypeError, ValueError) as exc:
        log.error("unable to marshal the metadata for spec - %s", exc)
        raise
    try:
        alpha = _dumps(spec.alpha)
    except (TypeError, ValueError) as exc:
        log.error("unable to marshal the alpha for spec - %s", exc)
        raise

    plans, errors = _convert_all(spec.plans, _convert_plan_to_crd)
    if errors:
        raise ConversionErrors(errors)

    return BundleSpec(
        runtime=spec.runtime,
        version=spec.version,
        fq_name=spec.fq_name,
        image=spec.image,
        tags=list(spec.tags),
        bindable=spec.bindable,
        description=spec.description,
        async_=convert_to_async_type(spec.async_),
        metadata=metadata,
        alpha=alpha,
        plans=plans,
        delete=spec.delete,
    )


def convert_bundle_to_spec(spec: BundleSpec, id: str) -> Spec:
    """Convert a bundle resource and its id (usually its name) to a bundle spec."""
    try:
        metadata = _loads_object(spec.metadata, "metadata")
    except ValueError as exc:
        log.error("unable to unmarshal the metadata for spec - %s", exc)
        raise
    try:
        alpha = _loads_object(spec.alpha, "alpha")
    except ValueError as exc:
        log.error("unable to unmarshal the alpha for spec - %s", exc)
        raise

    plans, errors = _convert_all(spec.plans, _convert_plan_to_apb)
    if errors:
        raise ConversionErrors(errors)

    return Spec(
        id=id,
        runtime=spec.runtime,
        version=spec.version,
        fq_name=spec.fq_name,
        image=spec.image,
        tags=list(spec.tags),
        bindable=spec.bindable,
        description=spec.description,
        async_=convert_async_type_to_string(spec.async_),
        metadata=metadata,
        alpha=alpha,
        plans=plans,
        delete=spec.delete,
    )


def convert_service_instance_to_crd(si: ServiceInstance) -> BundleInstance:
    """Convert a service instance to a bundle instance resource."""
    if si is None:
        raise ValueError("service instance is required")
    parameters = ""
    if si.parameters is not None:
        try:
            parameters = _dumps(si.parameters)
        except (TypeError, ValueError) as exc:
            log.error("unable to convert parameters to encoded json - %s", exc)
            raise

    bindings = [LocalObjectReference(name=key) for key in (si.binding_ids or {})]

    if si.spec is None:
        raise ValueError("service instance has no spec")
    if si.context is None:
        raise ValueError("service instance has no context")

    return BundleInstance(
        spec=BundleInstanceSpec(
            bundle=LocalObjectReference(name=si.spec.id),
            context=CrdContext(namespace=si.context.namespace, platform=si.context.platform),
            parameters=parameters,
            dashboard_url=si.dashboard_url,
        ),
        status=BundleInstanceStatus(bindings=bindings),
    )


def convert_service_instance_to_apb(si: BundleInstance, spec: Spec, id: str) -> ServiceInstance:
    """Convert a bundle instance resource, its bundle spec and id to a service instance."""
    parameters: dict[str, Any] = {}
    if si.spec.parameters:
        try:
            parameters = _loads_object(si.spec.parameters, "parameters")
        except ValueError as exc:
            log.error("unable to convert parameters to bundle parameters - %s", exc)
            raise

    return ServiceInstance(
        id=_parse_uuid(id),
        spec=spec,
        context=Context(namespace=si.spec.context.namespace, platform=si.spec.context.platform),
        parameters=parameters,
        binding_ids={ref.name: True for ref in si.status.bindings},
        dashboard_url=si.spec.dashboard_url,
    )


def convert_service_binding_to_crd(bi: BindInstance) -> BundleBinding:
    """Convert a bind instance to a bundle binding resource."""
    parameters = ""
    if bi.parameters is not None:
        try:
            parameters = _dumps(bi.parameters)
        except (TypeError, ValueError) as exc:
            log.error("Unable to marshal parameters to json - %s", exc)
            raise
    service_name = str(bi.service_id) if bi.service_id is not None else ""
    return BundleBinding(
        spec=BundleBindingSpec(
            bundle_instance=LocalObjectReference(name=service_name),
            parameters=parameters,
        )
    )


def convert_service_binding_to_apb(bi: BundleBinding, id: str) -> BindInstance:
    """Convert a bundle binding resource and its id (usually its name) to a bind instance."""
    parameters: dict[str, Any] = {}
    if bi.spec.parameters:
        try:
            parameters = _loads_object(bi.spec.parameters, "parameters")
        except ValueError as exc:
            log.error("Unable to unmarshal parameters to bundle parameters - %s", exc)
            raise
    return BindInstance(
        id=_parse_uuid(id),
        service_id=_parse_uuid(bi.spec.bundle_instance.name),
        parameters=parameters,
    )


def convert_state_to_crd(state: State | str) -> CrdState:
    """Convert a bundle job state; unknown states become FAILED."""
    result = _STATE_TO_CRD.get(state)
    if result is None:
        log.error("Job state not found: %s", state)
        return CrdState.FAILED
    return result


def convert_state_to_apb(state: CrdState | str) -> State:
    """Convert a resource job state; unknown states become FAILED."""
    result = _STATE_TO_APB.get(state)
    if result is None:
        log.error("Unable to find job state from - %s", state)
        return State.FAILED
    return result


def convert_job_method_to_crd(method: JobMethod | str) -> CrdJobMethod:
    """Convert a bundle job method; unknown methods become PROVISION."""
    result = _METHOD_TO_CRD.get(method)
    if result is None:
        log.error("unable to find the job method - %s", method)
        return CrdJobMethod.PROVISION
    return result


def convert_job_method_to_apb(method: CrdJobMethod | str) -> JobMethod:
    """Convert a resource job method; unknown methods become PROVISION."""
    result = _METHOD_TO_APB.get(method)
    if result is None:
        log.error("Unable to find job method from - %s", method)
        return JobMethod.PROVISION
    return result


def convert_to_async_type(value: str) -> AsyncType:
    """Map an async string to its type; anything unknown means REQUIRED."""
    try:
        return AsyncType(value)
    except ValueError:
        # Bundles take time to start, so async is the safe default.
        return AsyncType.REQUIRED


def convert_async_type_to_string(value: AsyncType | str) -> str:
    """Map an async type to its string; anything unknown means 'required'."""
    try:
        return AsyncType(value).value
    except ValueError:
        log.error("unable to find the async type - %s", value)
        return AsyncType.REQUIRED.value


def _convert_plan_to_crd(plan: Plan) -> CrdPlan:
    try:
        metadata = _dumps(plan.metadata)
    except (TypeError, ValueError) as exc:
        log.error("unable to marshal the metadata for plan - %s", exc)
        raise

    params, errors = _convert_all(plan.parameters, _convert_parameter_to_crd)
    bind_params, bind_errors = _convert_all(plan.bind_parameters, _convert_parameter_to_crd)
    errors.extend(bind_errors)
    if errors:
        raise ConversionErrors(errors)

    return CrdPlan(
        id=plan.id,
        name=plan.name,
        description=plan.description,
        metadata=metadata,
        free=plan.free,
        bindable=plan.bindable,
        updates_to=list(plan.updates_to),
        parameters=params,
        bind_parameters=bind_params,
    )


def _convert_parameter_to_crd(param: ParameterDescriptor) -> CrdParameter:
    try:
        default = _dumps({"default": param.default})
    except (TypeError, ValueError) as exc:
        log.error("unable to marshal the default for parameter - %s", exc)
        raise

    return CrdParameter(
        name=param.name,
        title=param.title,
        type=param.type,
        description=param.description,
        default=default,
        deprecated_max_length=param.deprecated_maxlength,
        max_length=param.max_length,
        min_length=param.min_length,
        pattern=param.pattern,
        multiple_of=param.multiple_of,
        maximum=_number(param.maximum),
        exclusive_maximum=_number(param.exclusive_maximum),
        exclusive_minimum=_number(param.exclusive_minimum),
        minimum=_number(param.minimum),
        enum=list(param.enum),
        required=param.required,
        updatable=param.updatable,
        display_type=param.display_type,
        display_group=param.display_group,
    )


def _convert_plan_to_apb(plan: CrdPlan) -> Plan:
    try:
        metadata = _loads_object(plan.metadata, "plan metadata")
    except ValueError as exc:
        log.error("unable to unmarshal the metadata for plan - %s", exc)
        raise

    params, errors = _convert_all(plan.parameters, _convert_parameter_to_apb)
    bind_params, bind_errors = _convert_all(plan.bind_parameters, _convert_parameter_to_apb)
    errors.extend(bind_errors)
    if errors:
        raise ConversionErrors(errors)

    return Plan(
        id=plan.id,
        name=plan.name,
        description=plan.description,
        metadata=metadata,
        free=plan.free,
        bindable=plan.bindable,
        updates_to=list(plan.updates_to),
        parameters=params,
        bind_parameters=bind_params,
    )


def _convert_parameter_to_apb(param: CrdParameter) -> ParameterDescriptor:
    try:
        wrapper = _loads_object(param.default, "parameter default")
    except ValueError as exc:
        log.error("unable to unmarshal the default for parameter - %s", exc)
        raise

    return ParameterDescriptor(
        name=param.name,
        title=param.title,
        type=param.type,
        description=param.description,
        default=wrapper.get("default"),
        deprecated_maxlength=param.deprecated_max_length,
        max_length=param.max_length,
        min_length=param.min_length,
        pattern=param.pattern,
        multiple_of=param.multiple_of,
        maximum=_number(param.maximum),
        exclusive_maximum=_number(param.exclusive_maximum),
        exclusive_minimum=_number(param.exclusive_minimum),
        minimum=_number(param.minimum),
        enum=list(param.enum),
        required=param.required,
        updatable=param.updatable,
        display_type=param.display_type,
        display_group=param.display_group,
    )