from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# Note: port names are IANA_SVC_NAME in the platform schema, at most 15 characters
_PORT_NAME_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
PORT_NAME_MAX_LENGTH = 15


def validate_port_name(name: str) -> str:
    if len(name) > PORT_NAME_MAX_LENGTH:
        raise ValueError(
            f"port name {name!r} is longer than {PORT_NAME_MAX_LENGTH} characters"
        )
    if not _PORT_NAME_PATTERN.match(name) or "--" in name:
        raise ValueError(f"port name {name!r} must be lowercase alphanumerics and '-'")
    if not any(ch.isalpha() for ch in name):
        raise ValueError(f"port name {name!r} must contain at least one letter")
    return name


class K8sModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_manifest(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ObjectMeta(K8sModel):
    name: Optional[str] = None
    namespace: Optional[str] = None
    labels: Optional[Dict[str, str]] = None


class LabelSelector(K8sModel):
    match_labels: Dict[str, str]


# --- Service ---------------------------------------------------------------


class ServicePort(K8sModel):
    name: str
    port: int
    target_port: Union[int, str]

    @field_validator("name")
    @classmethod
    def _short_port_name(cls, v: str) -> str:
        return validate_port_name(v)


class ClientIPConfig(K8sModel):
    timeout_seconds: Optional[int] = None


class SessionAffinityConfig(K8sModel):
    client_ip: ClientIPConfig = Field(alias="clientIP")


class ServiceSpec(K8sModel):
    selector: Dict[str, str]
    type: str = "ClusterIP"
    cluster_ip: Optional[str] = Field(default=None, alias="clusterIP")
    ports: Optional[List[ServicePort]] = None
    publish_not_ready_addresses: Optional[bool] = None
    session_affinity: Optional[str] = None
    session_affinity_config: Optional[SessionAffinityConfig] = None


class Service(K8sModel):
    api_version: str = "v1"
    kind: str = "Service"
    metadata: ObjectMeta
    spec: ServiceSpec


# --- Pod template ----------------------------------------------------------


class PodAffinityTerm(K8sModel):
    label_selector: LabelSelector
    topology_key: str


class WeightedPodAffinityTerm(K8sModel):
    weight: int = Field(ge=1, le=100)
    pod_affinity_term: PodAffinityTerm


class PodAffinity(K8sModel):
    preferred_during_scheduling_ignored_during_execution: List[WeightedPodAffinityTerm]


class Affinity(K8sModel):
    pod_affinity: Optional[PodAffinity] = None
    pod_anti_affinity: Optional[PodAffinity] = None


class PodSecurityContext(K8sModel):
    run_as_user: int
    run_as_group: int
    fs_group: int


class EmptyDirVolumeSource(K8sModel):
    pass


class Volume(K8sModel):
    name: str
    empty_dir: Optional[EmptyDirVolumeSource] = None


class VolumeMount(K8sModel):
    name: str
    mount_path: str


class ObjectFieldSelector(K8sModel):
    field_path: str


class EnvVarSource(K8sModel):
    field_ref: ObjectFieldSelector


class EnvVar(K8sModel):
    name: str
    value: Optional[str] = None
    value_from: Optional[EnvVarSource] = None


class ContainerPort(K8sModel):
    name: str
    container_port: int

    @field_validator("name")
    @classmethod
    def _short_port_name(cls, v: str) -> str:
        return validate_port_name(v)


class HTTPGetAction(K8sModel):
    port: Union[int, str]
    path: str


class Probe(K8sModel):
    http_get: HTTPGetAction
    initial_delay_seconds: int
    period_seconds: int


class Container(K8sModel):
    name: str
    image: str
    env: Optional[List[EnvVar]] = None
    ports: Optional[List[ContainerPort]] = None
    liveness_probe: Optional[Probe] = None
    readiness_probe: Optional[Probe] = None
    volume_mounts: Optional[List[VolumeMount]] = None


class PodSpec(K8sModel):
    affinity: Optional[Affinity] = None
    security_context: Optional[PodSecurityContext] = None
    volumes: Optional[List[Volume]] = None
    init_containers: Optional[List[Container]] = None
    service_account_name: Optional[str] = None
    containers: List[Container]


class PodTemplateSpec(K8sModel):
    metadata: ObjectMeta
    spec: PodSpec


# --- StatefulSet -----------------------------------------------------------


class PersistentVolumeClaimResources(K8sModel):
    requests: Dict[str, str]
    limits: Optional[Dict[str, str]] = None


class PersistentVolumeClaimSpec(K8sModel):
    access_modes: List[str]
    resources: PersistentVolumeClaimResources
    storage_class_name: Optional[str] = None


class PersistentVolumeClaim(K8sModel):
    metadata: ObjectMeta
    spec: PersistentVolumeClaimSpec


class StatefulSetSpec(K8sModel):
    selector: LabelSelector
    replicas: int = Field(ge=0)
    service_name: str
    pod_management_policy: str
    template: PodTemplateSpec
    volume_claim_templates: Optional[List[PersistentVolumeClaim]] = None


class StatefulSet(K8sModel):
    api_version: str = "apps/v1"
    kind: str = "StatefulSet"
    metadata: ObjectMeta
    spec: StatefulSetSpec


# --- PodDisruptionBudget ---------------------------------------------------


class PodDisruptionBudgetSpec(K8sModel):
    selector: LabelSelector
    max_unavailable: Union[int, str]


class PodDisruptionBudget(K8sModel):
    api_version: str = "policy/v1"
    kind: str = "PodDisruptionBudget"
    metadata: ObjectMeta
    spec: PodDisruptionBudgetSpec


class ConstructedObjects(BaseModel):
    """Everything one datacenter needs, in apply order."""

    model_config = ConfigDict(frozen=True)

    service: Service
    seed_service: Service
    stateful_sets: List[StatefulSet]
    disruption_budgets: List[PodDisruptionBudget]

    def all(self) -> List[K8sModel]:
        return [self.service, self.seed_service, *self.stateful_sets, *self.disruption_budgets]
