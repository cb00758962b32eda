from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from dse_manifests.utils.units import parse_storage_gb


DEFAULT_REPOSITORY = "datastax/dse-server"

AccessMode = Literal["ReadWriteOnce", "ReadWriteOncePod", "ReadWriteMany", "ReadOnlyMany"]

# object names derived from these land in label values, service names and pod hostnames
_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
MAX_NAME_LENGTH = 63
# leaves room for the pod ordinal and the controller-revision-hash suffix
MAX_STATEFUL_SET_NAME_LENGTH = 52


def validate_dns_label(value: str) -> str:
    if len(value) > MAX_NAME_LENGTH:
        raise ValueError(f"{value!r} is longer than {MAX_NAME_LENGTH} characters")
    if not _DNS_LABEL.match(value):
        raise ValueError(
            f"{value!r} must consist of lower case alphanumerics or '-', "
            "and start and end with an alphanumeric"
        )
    return value


class SpecModel(BaseModel):
    """Input models accept both snake_case and the camelCase used in YAML."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Rack(SpecModel):
    name: str = Field(min_length=1)
    replicas: int = Field(default=1, ge=0)

    @field_validator("name")
    @classmethod
    def _dns_name(cls, v: str) -> str:
        return validate_dns_label(v)


class ResourceRequirements(SpecModel):
    requests: Dict[str, str] = Field(default_factory=dict)
    limits: Dict[str, str] = Field(default_factory=dict)


class StorageClaim(SpecModel):
    storage_class_name: str
    resources: ResourceRequirements
    access_mode: AccessMode = "ReadWriteOnce"

    @field_validator("resources")
    @classmethod
    def _storage_request_required(cls, v: ResourceRequirements) -> ResourceRequirements:
        storage = v.requests.get("storage")
        if storage is None:
            raise ValueError("storage claim must request 'storage' under resources.requests")
        # raises ValueError with the offending quantity
        parse_storage_gb(storage)
        return v


class ClusterSpec(SpecModel):
    """
    Desired state of one datacenter of a DSE cluster.

    name is the datacenter name; cluster_name groups datacenters into a cluster.
    labels is the label map of the stored object, where the operator progress
    label lives. resource_version is opaque and only meaningful to apply clients.
    """

    name: str = Field(min_length=1)
    namespace: str = "default"
    cluster_name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    repository: Optional[str] = None
    racks: List[Rack] = Field(min_length=1)
    storage_claim: Optional[StorageClaim] = None
    config: Optional[Dict[str, Any]] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    resource_version: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _dns_name(cls, v: str) -> str:
        return validate_dns_label(v)

    @field_validator("cluster_name")
    @classmethod
    def _dns_cluster_name(cls, v: str) -> str:
        validate_dns_label(v)
        # service names are prefixed with it and must start with a letter
        if not v[0].isalpha():
            raise ValueError(f"cluster name {v!r} must start with a letter")
        return v

    @model_validator(mode="after")
    def _unique_rack_names(self) -> "ClusterSpec":
        seen: set[str] = set()
        for rack in self.racks:
            if rack.name in seen:
                raise ValueError(f"duplicate rack name {rack.name!r} in datacenter {self.name!r}")
            seen.add(rack.name)
        return self

    @model_validator(mode="after")
    def _derived_names_fit(self) -> "ClusterSpec":
        seed = self.seed_service_name()
        if len(seed) > MAX_NAME_LENGTH:
            raise ValueError(
                f"service name {seed!r} is longer than {MAX_NAME_LENGTH} characters; "
                "shorten the cluster or datacenter name"
            )
        for rack in self.racks:
            sts = self.stateful_set_name(rack.name)
            if len(sts) > MAX_STATEFUL_SET_NAME_LENGTH:
                raise ValueError(
                    f"statefulset name {sts!r} is longer than "
                    f"{MAX_STATEFUL_SET_NAME_LENGTH} characters; shorten the rack name"
                )
        return self

    def server_image(self, default_repository: str = DEFAULT_REPOSITORY) -> str:
        repository = self.repository or default_repository
        return f"{repository}:{self.version}"

    def service_name(self) -> str:
        return f"{self.cluster_name}-{self.name}-service"

    def seed_service_name(self) -> str:
        return f"{self.cluster_name}-{self.name}-seed-service"

    def stateful_set_name(self, rack_name: str) -> str:
        return f"{self.cluster_name}-{self.name}-{rack_name}-sts"
