from __future__ import annotations

from typing import List, Tuple

from dse_manifests.constructors.labels import datacenter_labels
from dse_manifests.models.objects import (
    ClientIPConfig,
    ObjectMeta,
    Service,
    ServicePort,
    ServiceSpec,
    SessionAffinityConfig,
)
from dse_manifests.models.spec import ClusterSpec


# (name, port). Note: port names cannot be more than 15 characters
SERVICE_PORTS: Tuple[Tuple[str, int], ...] = (
    ("native", 9042),
    ("inter-node-msg", 8609),
    ("intra-node", 7000),
    ("tls-intra-node", 7001),
    ("mgmt-api", 8080),
    ("prometheus", 9103),
)


def _service_ports() -> List[ServicePort]:
    return [ServicePort(name=name, port=port, target_port=port) for name, port in SERVICE_PORTS]


def build_cluster_service(spec: ClusterSpec) -> Service:
    """Headless service giving every pod of the datacenter a stable DNS identity."""
    labels = datacenter_labels(spec)
    return Service(
        metadata=ObjectMeta(
            name=spec.service_name(),
            namespace=spec.namespace,
            labels=labels,
        ),
        spec=ServiceSpec(
            # must match the pod template labels of every rack's statefulset
            selector=labels,
            type="ClusterIP",
            cluster_ip="None",
            ports=_service_ports(),
        ),
    )


def build_seed_service(spec: ClusterSpec) -> Service:
    """
    Headless service resolving to seed candidates.

    It carries no ports and publishes addresses of pods that are not ready yet:
    a new node has to find seeds before anything in the datacenter can become ready.
    """
    labels = datacenter_labels(spec)
    return Service(
        metadata=ObjectMeta(
            name=spec.seed_service_name(),
            namespace=spec.namespace,
            labels=labels,
        ),
        spec=ServiceSpec(
            selector=labels,
            type="ClusterIP",
            cluster_ip="None",
            ports=None,
            publish_not_ready_addresses=True,
            session_affinity="ClientIP",
            session_affinity_config=SessionAffinityConfig(client_ip=ClientIPConfig()),
        ),
    )
