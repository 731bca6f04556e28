"""Bundle specification types and spec/runtime version validation."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from semver import Version

log = logging.getLogger(__name__)

MIN_SPEC_VERSION = "1.0.0"
MAX_SPEC_VERSION = "1.0.0"
MIN_RUNTIME_VERSION = 1
MAX_RUNTIME_VERSION = 2

# Older bundles declare this version, which is not valid semver but is accepted.
_DEPRECATED_SPEC_VERSION = "1.0"

_MIN_SPEC_SEMVER = Version.parse(MIN_SPEC_VERSION)
_MAX_SPEC_SEMVER = Version.parse(MAX_SPEC_VERSION)


class State(str, Enum):
    """State of a bundle job."""

    NOT_YET_STARTED = "not yet started"
    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class JobMethod(str, Enum):
    """Operation a bundle job performs."""

    PROVISION = "provision"
    DEPROVISION = "deprovision"
    BIND = "bind"
    UNBIND = "unbind"
    UPDATE = "update"


@dataclass
class ParameterDescriptor:
    """Description of one parameter a bundle plan accepts."""

    name: str = ""
    title: str = ""
    type: str = ""
    description: str = ""
    default: Any = None
    deprecated_maxlength: int = 0
    max_length: int = 0
    min_length: int = 0
    pattern: str = ""
    multiple_of: float = 0.0
    maximum: float | None = None
    exclusive_maximum: float | None = None
    minimum: float | None = None
    exclusive_minimum: float | None = None
    enum: list[str] = field(default_factory=list)
    required: bool = False
    updatable: bool = False
    display_type: str = ""
    display_group: str = ""


@dataclass
class Plan:
    """A plan offered by a bundle."""

    id: str = ""
    name: str = ""
    description: str = ""
    metadata: dict[str, Any] | None = None
    free: bool = False
    bindable: bool = False
    updates_to: list[str] = field(default_factory=list)
    parameters: list[ParameterDescriptor] = field(default_factory=list)
    bind_parameters: list[ParameterDescriptor] = field(default_factory=list)


@dataclass
class Spec:
    """A bundle specification."""

    id: str = ""
    runtime: int = 0
    version: str = ""
    fq_name: str = ""
    image: str = ""
    tags: list[str] = field(default_factory=list)
    bindable: bool = False
    description: str = ""
    async_: str = ""
    metadata: dict[str, Any] | None = None
    alpha: dict[str, Any] | None = None
    plans: list[Plan] = field(default_factory=list)
    delete: bool = False

    def validate_version(self) -> bool:
        """Return True when both spec and runtime versions are supported."""
        return self._check_version() and self._check_runtime()

    def _check_version(self) -> bool:
        try:
            spec_semver = Version.parse(self.version)
        except (ValueError, TypeError):
            if self.version == _DEPRECATED_SPEC_VERSION:
                log.debug("Spec [%s] version (%s) not semver compatible", self.fq_name, self.version)
                return True
            return False

        if spec_semver < _MIN_SPEC_SEMVER:
            log.error("Spec version (%s) is less than the minimum version %s", self.version, MIN_SPEC_VERSION)
            return False
        if spec_semver > _MAX_SPEC_SEMVER:
            log.error("Spec version (%s) is greater than the maximum version %s", self.version, MAX_SPEC_VERSION)
            return False
        return True

    def _check_runtime(self) -> bool:
        return MIN_RUNTIME_VERSION <= self.runtime <= MAX_RUNTIME_VERSION


@dataclass
class Context:
    """Platform context a service instance lives in."""

    namespace: str = ""
    platform: str = ""


@dataclass
class ServiceInstance:
    """A provisioned instance of a bundle."""

    id: uuid.UUID | None = None
    spec: Spec | None = None
    context: Context | None = None
    parameters: dict[str, Any] | None = None
    binding_ids: dict[str, bool] = field(default_factory=dict)
    dashboard_url: str = ""


@dataclass
class BindInstance:
    """A binding to a service instance."""

    id: uuid.UUID | None = None
    service_id: uuid.UUID | None = None
    parameters: dict[str, Any] | None = None