from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from dse_manifests.constructors.config_payload import serialize_config
from dse_manifests.constructors.labels import DATACENTER_LABEL, RACK_LABEL, rack_labels
from dse_manifests.core.config import BuildConfig
from dse_manifests.models.objects import (
    Affinity,
    Container,
    ContainerPort,
    EmptyDirVolumeSource,
    EnvVar,
    EnvVarSource,
    HTTPGetAction,
    LabelSelector,
    ObjectFieldSelector,
    ObjectMeta,
    PersistentVolumeClaim,
    PersistentVolumeClaimResources,
    PersistentVolumeClaimSpec,
    PodAffinity,
    PodAffinityTerm,
    PodSecurityContext,
    PodSpec,
    PodTemplateSpec,
    Probe,
    StatefulSet,
    StatefulSetSpec,
    Volume,
    VolumeMount,
    WeightedPodAffinityTerm,
)
from dse_manifests.models.spec import ClusterSpec
from dse_manifests.utils.logger import get_logger


logger = get_logger(__name__)

SERVER_USER_ID = 999
SERVICE_ACCOUNT_NAME = "dse-operator"

CONFIG_VOLUME_NAME = "dse-config"
CONFIG_MOUNT_PATH = "/config"
DATA_VOLUME_NAME = "dse-data"
DATA_MOUNT_PATH = "/var/lib/cassandra"

ZONE_TOPOLOGY_KEY = "topology.kubernetes.io/zone"
HOST_TOPOLOGY_KEY = "kubernetes.io/hostname"

MGMT_API_PORT = 8080
LIVENESS_PATH = "/api/v0/probes/liveness"
READINESS_PATH = "/api/v0/probes/readiness"

# Same table as the cluster service minus prometheus; mgmt api is named for the pod side
CONTAINER_PORTS = (
    ("native", 9042),
    ("inter-node-msg", 8609),
    ("intra-node", 7000),
    ("tls-intra-node", 7001),
    ("mgmt-api-http", MGMT_API_PORT),
)


@dataclass(frozen=True, slots=True)
class WithStorage:
    claim_template: PersistentVolumeClaim
    mount: VolumeMount


@dataclass(frozen=True, slots=True)
class WithoutStorage:
    pass


StoragePlan = Union[WithStorage, WithoutStorage]


def plan_storage(spec: ClusterSpec, labels: Dict[str, str]) -> StoragePlan:
    """Decide once whether pods get a persistent data volume."""
    claim = spec.storage_claim
    if claim is None:
        return WithoutStorage()
    template = PersistentVolumeClaim(
        metadata=ObjectMeta(name=DATA_VOLUME_NAME, labels=labels),
        spec=PersistentVolumeClaimSpec(
            access_modes=[claim.access_mode],
            resources=PersistentVolumeClaimResources(
                requests=dict(claim.resources.requests),
                limits=dict(claim.resources.limits) or None,
            ),
            storage_class_name=claim.storage_class_name,
        ),
    )
    return WithStorage(
        claim_template=template,
        mount=VolumeMount(name=DATA_VOLUME_NAME, mount_path=DATA_MOUNT_PATH),
    )


def _affinity(spec: ClusterSpec, rack_name: str) -> Affinity:
    # Keep a rack's pods within one zone to limit cross zone traffic, but spread
    # the datacenter's pods across hosts. Both are preferences only.
    return Affinity(
        pod_affinity=PodAffinity(
            preferred_during_scheduling_ignored_during_execution=[
                WeightedPodAffinityTerm(
                    weight=100,
                    pod_affinity_term=PodAffinityTerm(
                        label_selector=LabelSelector(match_labels={RACK_LABEL: rack_name}),
                        topology_key=ZONE_TOPOLOGY_KEY,
                    ),
                )
            ]
        ),
        pod_anti_affinity=PodAffinity(
            preferred_during_scheduling_ignored_during_execution=[
                WeightedPodAffinityTerm(
                    weight=90,
                    pod_affinity_term=PodAffinityTerm(
                        label_selector=LabelSelector(match_labels={DATACENTER_LABEL: spec.name}),
                        topology_key=HOST_TOPOLOGY_KEY,
                    ),
                )
            ]
        ),
    )


def _field_env(name: str, field_path: str) -> EnvVar:
    return EnvVar(
        name=name,
        value_from=EnvVarSource(field_ref=ObjectFieldSelector(field_path=field_path)),
    )


def _config_init_container(
    spec: ClusterSpec, config_data: str, config_mount: VolumeMount, cfg: BuildConfig
) -> Container:
    return Container(
        name="dse-config-init",
        image=cfg.config_builder_image,
        volume_mounts=[config_mount],
        env=[
            EnvVar(name="CONFIG_FILE_DATA", value=config_data),
            _field_env("POD_IP", "status.podIP"),
            # read back from the pod so it is whatever label the platform applied
            _field_env("RACK_NAME", f"metadata.labels['{RACK_LABEL}']"),
            EnvVar(name="DSE_VERSION", value=spec.version),
        ],
    )


def _http_probe(path: str, initial_delay: int, period: int) -> Probe:
    return Probe(
        http_get=HTTPGetAction(port=MGMT_API_PORT, path=path),
        initial_delay_seconds=initial_delay,
        period_seconds=period,
    )


def _server_container(
    spec: ClusterSpec, volume_mounts: List[VolumeMount], cfg: BuildConfig
) -> Container:
    return Container(
        name="dse",
        image=spec.server_image(cfg.default_repository),
        env=[
            EnvVar(name="DS_LICENSE", value="accept"),
            EnvVar(name="DSE_AUTO_CONF_OFF", value="all"),
        ],
        ports=[ContainerPort(name=name, container_port=port) for name, port in CONTAINER_PORTS],
        liveness_probe=_http_probe(LIVENESS_PATH, initial_delay=15, period=15),
        # becomes ready well after it becomes live
        readiness_probe=_http_probe(READINESS_PATH, initial_delay=20, period=10),
        volume_mounts=volume_mounts,
    )


def build_stateful_set(
    rack_name: str,
    spec: ClusterSpec,
    replica_count: int,
    cfg: Optional[BuildConfig] = None,
) -> StatefulSet:
    """
    Build the statefulset for one rack of a datacenter.

    Raises ConfigSerializationError when spec.config cannot be rendered; nothing is
    built in that case.
    """
    cfg = cfg or BuildConfig()
    config_data = serialize_config(spec)
    labels = rack_labels(spec, rack_name)
    storage = plan_storage(spec, labels)

    config_mount = VolumeMount(name=CONFIG_VOLUME_NAME, mount_path=CONFIG_MOUNT_PATH)
    server_mounts = [config_mount]
    claim_templates: Optional[List[PersistentVolumeClaim]] = None
    if isinstance(storage, WithStorage):
        server_mounts.append(storage.mount)
        claim_templates = [storage.claim_template]

    name = spec.stateful_set_name(rack_name)
    result = StatefulSet(
        metadata=ObjectMeta(name=name, namespace=spec.namespace, labels=labels),
        spec=StatefulSetSpec(
            # must equal the template labels or the platform rejects the object
            selector=LabelSelector(match_labels=labels),
            replicas=replica_count,
            service_name=spec.service_name(),
            pod_management_policy="OrderedReady",
            template=PodTemplateSpec(
                metadata=ObjectMeta(labels=labels),
                spec=PodSpec(
                    affinity=_affinity(spec, rack_name),
                    security_context=PodSecurityContext(
                        run_as_user=SERVER_USER_ID,
                        run_as_group=SERVER_USER_ID,
                        fs_group=SERVER_USER_ID,
                    ),
                    volumes=[Volume(name=CONFIG_VOLUME_NAME, empty_dir=EmptyDirVolumeSource())],
                    init_containers=[_config_init_container(spec, config_data, config_mount, cfg)],
                    service_account_name=SERVICE_ACCOUNT_NAME,
                    containers=[_server_container(spec, server_mounts, cfg)],
                ),
            ),
            volume_claim_templates=claim_templates,
        ),
    )
    logger.debug(
        "built statefulset %s replicas=%d storage=%s",
        name,
        replica_count,
        type(storage).__name__,
    )
    return result
