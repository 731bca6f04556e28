# bundlekit

Tools for working with service bundles: the plan and parameter data
model, the JSON Schemas and form definitions a service catalog shows for
plans, conversion to and from custom resource records, a probe of the
etcd version endpoint, and an in-process sandbox gauge.

## Install

```
pip install bundlekit
```

For running the tests:

```
pip install "bundlekit[test]"
pytest
```

## Bundle specs

`bundlekit.spec` holds the data model as dataclasses: `Spec`, `Plan`,
`ParameterDescriptor`, `Context`, `ServiceInstance` and `BindInstance`,
with the `State` and `JobMethod` enums.

`Spec.validate_version()` returns `True` only when the spec version is
`1.0.0` (the older, non-semver `1.0` is also accepted) and the runtime is
1 or 2:

```python
from bundlekit.spec import Spec

assert Spec(version="1.0.0", runtime=2).validate_version()
assert not Spec(version="1.0.1", runtime=2).validate_version()
assert not Spec(version="1.0.0", runtime=3).validate_version()
```

## Plan schemas

`bundlekit.schema` turns plans into what a service catalog expects:

- `get_type(param_type)` maps a parameter type, case-insensitively, to a
  one-element list of `PrimitiveType` (`"enum"` becomes `STRING`, `"int"`
  becomes `INTEGER`, `"nil"` becomes `NULL`, and so on). Unknown types
  raise `ValueError`.
- `parameters_to_schema(plan)` returns a `Schema` with three
  `ObjectSchema`s: `instance_create` (all parameters), `instance_update`
  (only parameters marked updatable, with required names limited to
  those) and `binding_create` (the bind parameters). Each property is a
  `PropertySchema` carrying title, description, default, enum and, by
  type, string length and pattern limits or numeric bounds. A pattern
  that does not compile is logged and left out.
- `create_form_definition(params)` gives a form definition: a parameter
  without a display type is its bare name, one with a display type is a
  `FormItem` with `key` and `type`, and consecutive parameters sharing a
  display group are gathered into a `FormItem` of type `"fieldset"`.
- `extract_broker_plan_metadata(plan)` copies the plan metadata and adds
  the form definitions under `"schemas"`.
- `convert_plans_to_schema(plans)` returns one `SchemaPlan` per plan.
- `plan_updatable(plans)` tells whether any plan lists plans it can be
  updated to.

`PropertySchema`, `ObjectSchema`, `Schema`, `SchemaPlan` and `FormItem`
each have `to_dict()` for a plain JSON-ready dictionary that leaves unset
keywords out.

```python
from bundlekit.schema import parameters_to_schema
from bundlekit.spec import ParameterDescriptor, Plan

plan = Plan(name="dev", parameters=[
    ParameterDescriptor(name="size", type="int", minimum=1, required=True),
])
print(parameters_to_schema(plan).instance_create.to_dict())
```

## Custom resource conversions

`bundlekit.crd.resources` defines the resource records (`BundleSpec`,
`CrdPlan`, `CrdParameter`, `BundleInstance`, `BundleBinding` and their
parts) and the `AsyncType`, `CrdState` and `CrdJobMethod` enums. Metadata,
alpha, parameter defaults and instance or binding parameters are stored
there as compact JSON text with sorted keys.

`bundlekit.crd.conversions` converts in both directions:
`convert_spec_to_bundle`, `convert_bundle_to_spec`,
`convert_service_instance_to_crd`, `convert_service_instance_to_apb`,
`convert_service_binding_to_crd` and `convert_service_binding_to_apb`.
Invalid JSON or values that cannot be serialised raise `ValueError` or
`TypeError`; failures in several plans or parameters are gathered into
one `ConversionErrors` (a `ValueError` whose `errors` lists them).

The enum mappings never raise: unknown states become `FAILED`
(`convert_state_to_crd`, `convert_state_to_apb`), unknown job methods
become `PROVISION` (`convert_job_method_to_crd`,
`convert_job_method_to_apb`), and unknown async values become required
(`convert_to_async_type`, `convert_async_type_to_string`).

## etcd

`bundlekit.etcd.EtcdConfig` holds `host`, `port`, `ca_file`,
`client_cert` and `client_key`. `endpoint()` uses `https` when a CA file
is set and `http` otherwise. `ssl_context()` returns `None` when no TLS
file is set, otherwise an `ssl.SSLContext` with the CA and, when both are
given, the client certificate and key; unreadable files raise
`EtcdError`.

`get_etcd_version(config)` fetches `http://host:port/version` and returns
`(server_version, cluster_version)`. Connection failures, non-200 answers
and malformed bodies raise `EtcdError`.

## Metrics

`bundlekit.metrics` keeps a `bundlelib_sandbox` `Gauge`. Call
`register_collector()` once (later calls return the same `Collector`),
then `sandbox_created()` and `sandbox_deleted()`. These never raise:
when no collector is registered the failure is only logged.
`Collector.describe()` returns `(name, help)` pairs and
`Collector.collect()` returns `(name, value)` pairs.

## What it does not do

- It is not an etcd client: it only reads the version endpoint and
  builds connection settings; it stores and reads no keys.
- It talks to no cluster API: the custom resource records are plain
  dataclasses, and nothing here creates, reads or deletes resources,
  secrets, service accounts or role bindings.
- Metrics stay in process; nothing exports or serves them.
- There is no command-line program.