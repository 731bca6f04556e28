"""Custom resource types that store bundles, instances and bindings in a cluster."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AsyncType(str, Enum):
    """How a bundle supports asynchronous operations."""

    OPTIONAL = "optional"
    REQUIRED = "required"
    UNSUPPORTED = "unsupported"


class CrdState(str, Enum):
    """Job state as stored in a custom resource."""

    NOT_YET_STARTED = "not yet started"
    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CrdJobMethod(str, Enum):
    """Job method as stored in a custom resource."""

    PROVISION = "provision"
    DEPROVISION = "deprovision"
    BIND = "bind"
    UNBIND = "unbind"
    UPDATE = "update"


@dataclass
class LocalObjectReference:
    """Reference to another resource by name."""

    name: str = ""


@dataclass
class CrdParameter:
    """A plan parameter; the default value is kept as a JSON document."""

    name: str = ""
    title: str = ""
    type: str = ""
    description: str = ""
    default: str = ""
    deprecated_max_length: int = 0
    max_length: int = 0
    min_length: int = 0
    pattern: str = ""
    multiple_of: float = 0.0
    maximum: float | None = None
    exclusive_maximum: float | None = None
    exclusive_minimum: float | None = None
    minimum: float | None = None
    enum: list[str] = field(default_factory=list)
    required: bool = False
    updatable: bool = False
    display_type: str = ""
    display_group: str = ""


@dataclass
class CrdPlan:
    """A bundle plan; its metadata is kept as a JSON document."""

    id: str = ""
    name: str = ""
    description: str = ""
    metadata: str = ""
    free: bool = False
    bindable: bool = False
    updates_to: list[str] = field(default_factory=list)
    parameters: list[CrdParameter] = field(default_factory=list)
    bind_parameters: list[CrdParameter] = field(default_factory=list)


@dataclass
class BundleSpec:
    """A bundle; metadata and alpha are kept as JSON documents."""

    runtime: int = 0
    version: str = ""
    fq_name: str = ""
    image: str = ""
    tags: list[str] = field(default_factory=list)
    bindable: bool = False
    description: str = ""
    async_: AsyncType = AsyncType.REQUIRED
    metadata: str = ""
    alpha: str = ""
    plans: list[CrdPlan] = field(default_factory=list)
    delete: bool = False


@dataclass
class CrdContext:
    """Platform context of a bundle instance."""

    namespace: str = ""
    platform: str = ""


@dataclass
class BundleInstanceSpec:
    """Desired state of a bundle instance."""

    bundle: LocalObjectReference = field(default_factory=LocalObjectReference)
    context: CrdContext = field(default_factory=CrdContext)
    parameters: str = ""
    dashboard_url: str = ""


@dataclass
class BundleInstanceStatus:
    """Observed state of a bundle instance."""

    bindings: list[LocalObjectReference] = field(default_factory=list)


@dataclass
class BundleInstance:
    """A bundle instance resource."""

    name: str = ""
    namespace: str = ""
    spec: BundleInstanceSpec = field(default_factory=BundleInstanceSpec)
    status: BundleInstanceStatus = field(default_factory=BundleInstanceStatus)


@dataclass
class BundleBindingSpec:
    """Desired state of a bundle binding."""

    bundle_instance: LocalObjectReference = field(default_factory=LocalObjectReference)
    parameters: str = ""


@dataclass
class BundleBinding:
    """A bundle binding resource."""

    name: str = ""
    namespace: str = ""
    spec: BundleBindingSpec = field(default_factory=BundleBindingSpec)