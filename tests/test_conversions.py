import json
import uuid

import pytest

from bundlekit.crd.conversions import (
    ConversionErrors,
    convert_async_type_to_string,
    convert_bundle_to_spec,
    convert_job_method_to_apb,
    convert_job_method_to_crd,
    convert_service_binding_to_apb,
    convert_service_binding_to_crd,
    convert_service_instance_to_apb,
    convert_service_instance_to_crd,
    convert_spec_to_bundle,
    convert_state_to_apb,
    convert_state_to_crd,
    convert_to_async_type,
)
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

PARAMS_JSON = '{"_apb_creds":"secret","foo":"bar"}'


@pytest.fixture
def uid():
    return str(uuid.uuid4())


@pytest.mark.parametrize(
    "value, expected",
    [
        (JobMethod.PROVISION, CrdJobMethod.PROVISION),
        (JobMethod.DEPROVISION, CrdJobMethod.DEPROVISION),
        (JobMethod.BIND, CrdJobMethod.BIND),
        (JobMethod.UNBIND, CrdJobMethod.UNBIND),
        (JobMethod.UPDATE, CrdJobMethod.UPDATE),
        ("", CrdJobMethod.PROVISION),
        ("unknown", CrdJobMethod.PROVISION),
    ],
)
def test_convert_job_method_to_crd(value, expected):
    assert convert_job_method_to_crd(value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (CrdJobMethod.PROVISION, JobMethod.PROVISION),
        (CrdJobMethod.DEPROVISION, JobMethod.DEPROVISION),
        (CrdJobMethod.BIND, JobMethod.BIND),
        (CrdJobMethod.UNBIND, JobMethod.UNBIND),
        (CrdJobMethod.UPDATE, JobMethod.UPDATE),
        ("", JobMethod.PROVISION),
        ("unknown", JobMethod.PROVISION),
    ],
)
def test_convert_job_method_to_apb(value, expected):
    assert convert_job_method_to_apb(value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (CrdState.NOT_YET_STARTED, State.NOT_YET_STARTED),
        (CrdState.IN_PROGRESS, State.IN_PROGRESS),
        (CrdState.SUCCEEDED, State.SUCCEEDED),
        (CrdState.FAILED, State.FAILED),
        ("", State.FAILED),
        ("unknown", State.FAILED),
    ],
)
def test_convert_state_to_apb(value, expected):
    assert convert_state_to_apb(value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (State.NOT_YET_STARTED, CrdState.NOT_YET_STARTED),
        (State.IN_PROGRESS, CrdState.IN_PROGRESS),
        (State.SUCCEEDED, CrdState.SUCCEEDED),
        (State.FAILED, CrdState.FAILED),
        ("", CrdState.FAILED),
        ("unknown", CrdState.FAILED),
    ],
)
def test_convert_state_to_crd(value, expected):
    assert convert_state_to_crd(value) is expected


def test_service_binding_to_apb_zero_value():
    out = convert_service_binding_to_apb(BundleBinding(), "")
    assert out == BindInstance(parameters={})


def test_service_binding_to_apb_invalid_json():
    binding = BundleBinding(
        spec=BundleBindingSpec(
            bundle_instance=LocalObjectReference(name="mynameis"),
            parameters='{"_apb_creds":"secret","foo":"bar"',
        )
    )
    with pytest.raises(ValueError):
        convert_service_binding_to_apb(binding, binding.name)


def test_service_binding_to_apb_copies_parameters(uid):
    binding = BundleBinding(
        name=uid,
        namespace="testing",
        spec=BundleBindingSpec(
            bundle_instance=LocalObjectReference(name=uid),
            parameters=PARAMS_JSON,
        ),
    )
    out = convert_service_binding_to_apb(binding, binding.name)
    assert out == BindInstance(
        id=uuid.UUID(uid),
        service_id=uuid.UUID(uid),
        parameters={"foo": "bar", "_apb_creds": "secret"},
    )


def test_service_binding_to_crd_zero_value():
    assert convert_service_binding_to_crd(BindInstance()) == BundleBinding()


def test_service_binding_to_crd_copies_parameters(uid):
    bi = BindInstance(
        id=uuid.UUID(uid),
        service_id=uuid.UUID(uid),
        parameters={"foo": "bar", "_apb_creds": "secret"},
    )
    out = convert_service_binding_to_crd(bi)
    assert out == BundleBinding(
        spec=BundleBindingSpec(
            bundle_instance=LocalObjectReference(name=uid),
            parameters=PARAMS_JSON,
        )
    )


def test_service_binding_to_crd_invalid_parameters(uid):
    bi = BindInstance(id=uuid.UUID(uid), service_id=uuid.UUID(uid), parameters={"foo": object()})
    with pytest.raises(TypeError):
        convert_service_binding_to_crd(bi)


def test_service_instance_to_apb_zero_value(uid):
    out = convert_service_instance_to_apb(BundleInstance(), Spec(), uid)
    assert out == ServiceInstance(
        id=uuid.UUID(uid),
        spec=Spec(),
        context=Context(),
        parameters={},
        binding_ids={},
    )


def test_service_instance_to_apb_invalid_parameters(uid):
    instance = BundleInstance(
        spec=BundleInstanceSpec(
            bundle=LocalObjectReference(name=uid),
            context=CrdContext(namespace="testnamespace", platform="kubernetes"),
            parameters='"_apb_creds":"secret","foo":"bar"}',
        ),
        status=BundleInstanceStatus(bindings=[LocalObjectReference(name="a binding")]),
    )
    with pytest.raises(ValueError):
        convert_service_instance_to_apb(instance, Spec(), uid)


def test_service_instance_to_apb_copies_parameters(uid):
    instance = BundleInstance(
        spec=BundleInstanceSpec(
            bundle=LocalObjectReference(name=uid),
            context=CrdContext(namespace="testnamespace", platform="kubernetes"),
            parameters=PARAMS_JSON,
            dashboard_url="http://example.com/dashboard",
        ),
        status=BundleInstanceStatus(bindings=[LocalObjectReference(name="a binding")]),
    )
    out = convert_service_instance_to_apb(instance, Spec(), uid)
    assert out == ServiceInstance(
        id=uuid.UUID(uid),
        spec=Spec(),
        context=Context(namespace="testnamespace", platform="kubernetes"),
        parameters={"foo": "bar", "_apb_creds": "secret"},
        binding_ids={"a binding": True},
        dashboard_url="http://example.com/dashboard",
    )


def test_spec_to_bundle_zero_value():
    out = convert_spec_to_bundle(Spec())
    assert out == BundleSpec(
        async_=convert_to_async_type("required"),
        metadata="null",
        alpha="null",
        plans=[],
    )


def test_spec_to_bundle_invalid_alpha():
    with pytest.raises(TypeError):
        convert_spec_to_bundle(Spec(alpha={"foo": object()}))


def test_spec_to_bundle_invalid_metadata():
    with pytest.raises(TypeError):
        convert_spec_to_bundle(Spec(metadata={"foo": object()}))


def test_spec_to_bundle_invalid_plan_metadata():
    spec = Spec(plans=[Plan(name="blowup", metadata={"foo": object()})])
    with pytest.raises(ConversionErrors) as info:
        convert_spec_to_bundle(spec)
    assert len(info.value.errors) == 1


def test_spec_to_bundle_invalid_plan_parameters():
    spec = Spec(
        plans=[
            Plan(
                name="blowup",
                metadata={"_apb_creds": "secret"},
                parameters=[ParameterDescriptor(name="param1", type="string", default=object())],
            )
        ]
    )
    with pytest.raises(ConversionErrors):
        convert_spec_to_bundle(spec)


def test_spec_to_bundle_invalid_plan_bind_parameters():
    spec = Spec(
        plans=[
            Plan(
                name="blowup",
                metadata={"_apb_creds": "secret"},
                bind_parameters=[ParameterDescriptor(name="param1", type="string", default=object())],
            )
        ]
    )
    with pytest.raises(ConversionErrors):
        convert_spec_to_bundle(spec)


def _full_spec(uid, default):
    return Spec(
        id=uid,
        runtime=2,
        version="1.2.3",
        fq_name="chevy/camaro-apb",
        image="chevy/cavalier-apb",
        tags=["cars", "chevy"],
        bindable=True,
        description="description",
        async_="optional",
        metadata={"_apb_creds": "secret", "foo": "bar"},
        alpha={"alpha_apb_creds": "secret", "alphafoo": "bar"},
        plans=[
            Plan(
                name="dev",
                bindable=True,
                metadata={"plan_param1": "value1", "plan_param2": "bar"},
                parameters=[
                    ParameterDescriptor(name="param1", type="string", description="parameter one"),
                    ParameterDescriptor(
                        name="param2",
                        type="int",
                        description="parameter two",
                        default=default,
                        maximum=20.0,
                        exclusive_maximum=40.0,
                        minimum=5.0,
                        exclusive_minimum=5.0,
                    ),
                ],
                bind_parameters=[
                    ParameterDescriptor(name="bindparam1", type="string", description="bind parameter one"),
                    ParameterDescriptor(
                        name="bindparam2", type="int", description="bind parameter two", default=default
                    ),
                ],
            )
        ],
    )


def _full_bundle():
    return BundleSpec(
        runtime=2,
        version="1.2.3",
        fq_name="chevy/camaro-apb",
        image="chevy/cavalier-apb",
        tags=["cars", "chevy"],
        bindable=True,
        description="description",
        async_=convert_to_async_type("optional"),
        metadata='{"_apb_creds":"secret","foo":"bar"}',
        alpha='{"alpha_apb_creds":"secret","alphafoo":"bar"}',
        plans=[
            CrdPlan(
                name="dev",
                bindable=True,
                metadata='{"plan_param1":"value1","plan_param2":"bar"}',
                parameters=[
                    CrdParameter(
                        name="param1", type="string", description="parameter one", default='{"default":null}'
                    ),
                    CrdParameter(
                        name="param2",
                        type="int",
                        description="parameter two",
                        default='{"default":10}',
                        maximum=20.0,
                        exclusive_maximum=40.0,
                        minimum=5.0,
                        exclusive_minimum=5.0,
                    ),
                ],
                bind_parameters=[
                    CrdParameter(
                        name="bindparam1",
                        type="string",
                        description="bind parameter one",
                        default='{"default":null}',
                    ),
                    CrdParameter(
                        name="bindparam2",
                        type="int",
                        description="bind parameter two",
                        default='{"default":10}',
                    ),
                ],
            )
        ],
    )


def test_spec_to_bundle_copies_everything(uid):
    assert convert_spec_to_bundle(_full_spec(uid, 10)) == _full_bundle()


def test_bundle_to_spec_zero_value_fails():
    with pytest.raises(ValueError):
        convert_bundle_to_spec(BundleSpec(), "")


def test_bundle_to_spec_invalid_metadata():
    with pytest.raises(ValueError):
        convert_bundle_to_spec(BundleSpec(metadata='{"_apb_creds":"secret","foo":"bar"'), "")


def test_bundle_to_spec_invalid_alpha():
    bundle = BundleSpec(metadata="{}", alpha='"alpha_apb_creds":"secret","alphafoo":"bar"}')
    with pytest.raises(ValueError):
        convert_bundle_to_spec(bundle, "")


def test_bundle_to_spec_invalid_plan_metadata():
    bundle = BundleSpec(
        metadata="{}",
        alpha="{}",
        plans=[CrdPlan(name="dev", metadata='"plan_param1":"value1","plan_param2":"bar"')],
    )
    with pytest.raises(ConversionErrors):
        convert_bundle_to_spec(bundle, "")


@pytest.mark.parametrize("field_name", ["parameters", "bind_parameters"])
def test_bundle_to_spec_invalid_plan_parameter_default(field_name):
    bad = [CrdParameter(name="param1", type="string", description="parameter one", default='"default":null}')]
    plan = CrdPlan(name="dev", metadata='{"plan_param1":"value1","plan_param2":"bar"}', **{field_name: bad})
    bundle = BundleSpec(
        alpha='{"alpha_apb_creds":"secret","alphafoo":"bar"}',
        metadata='{"_apb_creds":"secret","foo":"bar"}',
        plans=[plan],
    )
    with pytest.raises(ConversionErrors):
        convert_bundle_to_spec(bundle, "")


def test_bundle_to_spec_copies_everything(uid):
    out = convert_bundle_to_spec(_full_bundle(), uid)
    assert out == _full_spec(uid, 10.0)
    assert isinstance(out.plans[0].parameters[1].default, float)


def test_spec_bundle_round_trip(uid):
    spec = _full_spec(uid, 10.0)
    assert convert_bundle_to_spec(convert_spec_to_bundle(spec), uid) == spec


def test_service_instance_to_crd_missing_spec():
    with pytest.raises(ValueError):
        convert_service_instance_to_crd(ServiceInstance())


def test_service_instance_to_crd_none():
    with pytest.raises(ValueError):
        convert_service_instance_to_crd(None)


def test_service_instance_to_crd_zero_value():
    out = convert_service_instance_to_crd(ServiceInstance(spec=Spec(), context=Context()))
    assert out == BundleInstance(status=BundleInstanceStatus(bindings=[]))


def test_service_instance_to_crd_invalid_parameters():
    with pytest.raises(TypeError):
        convert_service_instance_to_crd(ServiceInstance(parameters={"foo": object()}))


def test_service_instance_to_crd_copies_parameters(uid):
    si = ServiceInstance(
        id=uuid.UUID(uid),
        spec=Spec(id=uid),
        context=Context(namespace="testnamespace", platform="kubernetes"),
        parameters={"foo": "bar", "_apb_creds": "secret"},
        binding_ids={"a binding": True},
        dashboard_url="http://example.com/dashboard",
    )
    out = convert_service_instance_to_crd(si)
    assert out == BundleInstance(
        spec=BundleInstanceSpec(
            bundle=LocalObjectReference(name=uid),
            context=CrdContext(namespace="testnamespace", platform="kubernetes"),
            parameters=PARAMS_JSON,
            dashboard_url="http://example.com/dashboard",
        ),
        status=BundleInstanceStatus(bindings=[LocalObjectReference(name="a binding")]),
    )


def test_spec_to_bundle_from_loaded_document():
    spec = Spec(
        version="1.0",
        fq_name="testapp",
        description="your description",
        bindable=False,
        async_="optional",
        metadata={"displayName": "testapp"},
        plans=[
            Plan(
                name="default",
                description="This default plan deploys testapp",
                free=True,
                metadata={},
                parameters=[
                    ParameterDescriptor(
                        name="countwithrange",
                        title="Count Chocula",
                        type="int",
                        required=True,
                        updatable=True,
                        display_type="text",
                        maximum=10,
                        minimum=2,
                    ),
                    ParameterDescriptor(
                        name="exclusiveberries",
                        title="Franken Berry",
                        type="int",
                        required=True,
                        updatable=True,
                        display_type="text",
                        maximum=10,
                        exclusive_maximum=10,
                        minimum=2,
                        exclusive_minimum=2,
                    ),
                ],
            )
        ],
    )
    expected = BundleSpec(
        version="1.0",
        fq_name="testapp",
        bindable=False,
        description="your description",
        async_=convert_to_async_type("optional"),
        metadata='{"displayName":"testapp"}',
        alpha="null",
        plans=[
            CrdPlan(
                name="default",
                bindable=False,
                free=True,
                metadata="{}",
                description="This default plan deploys testapp",
                parameters=[
                    CrdParameter(
                        name="countwithrange",
                        type="int",
                        title="Count Chocula",
                        required=True,
                        updatable=True,
                        default='{"default":null}',
                        maximum=10.0,
                        minimum=2.0,
                        display_type="text",
                    ),
                    CrdParameter(
                        name="exclusiveberries",
                        type="int",
                        title="Franken Berry",
                        required=True,
                        updatable=True,
                        default='{"default":null}',
                        maximum=10.0,
                        exclusive_maximum=10.0,
                        minimum=2.0,
                        exclusive_minimum=2.0,
                        display_type="text",
                    ),
                ],
                bind_parameters=[],
            )
        ],
    )
    assert convert_spec_to_bundle(spec) == expected


def test_integral_float_default_written_as_integer():
    spec = Spec(plans=[Plan(parameters=[ParameterDescriptor(name="n", type="number", default=3.0)])])
    out = convert_spec_to_bundle(spec)
    assert json.loads(out.plans[0].parameters[0].default) == {"default": 3}
    assert out.plans[0].parameters[0].default == '{"default":3}'


@pytest.mark.parametrize(
    "value, expected",
    [
        (AsyncType.OPTIONAL, "optional"),
        (AsyncType.REQUIRED, "required"),
        (AsyncType.UNSUPPORTED, "unsupported"),
        ("unknown", "required"),
    ],
)
def test_convert_async_type_to_string(value, expected):
    assert convert_async_type_to_string(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("optional", AsyncType.OPTIONAL),
        ("required", AsyncType.REQUIRED),
        ("unsupported", AsyncType.UNSUPPORTED),
        ("unknown", AsyncType.REQUIRED),
        ("Optional", AsyncType.REQUIRED),
        ("", AsyncType.REQUIRED),
    ],
)
def test_convert_to_async_type(value, expected):
    assert convert_to_async_type(value) is expected