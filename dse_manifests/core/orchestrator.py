from __future__ import annotations

from typing import List, Optional

from dse_manifests.constructors.disruption import build_disruption_budget
from dse_manifests.constructors.services import build_cluster_service, build_seed_service
from dse_manifests.constructors.statefulset import build_stateful_set
from dse_manifests.core.config import BuildConfig
from dse_manifests.models.objects import ConstructedObjects, PodDisruptionBudget, StatefulSet
from dse_manifests.models.spec import ClusterSpec
from dse_manifests.utils.logger import get_logger


logger = get_logger(__name__)


def build_datacenter(spec: ClusterSpec, cfg: Optional[BuildConfig] = None) -> ConstructedObjects:
    cfg = cfg or BuildConfig()

    stateful_sets: List[StatefulSet] = [
        build_stateful_set(rack.name, spec, rack.replicas, cfg) for rack in spec.racks
    ]
    disruption_budgets: List[PodDisruptionBudget] = [
        build_disruption_budget(spec, sts) for sts in stateful_sets
    ]

    logger.debug(
        "built datacenter %s/%s: %d racks",
        spec.cluster_name,
        spec.name,
        len(stateful_sets),
    )
    return ConstructedObjects(
        service=build_cluster_service(spec),
        seed_service=build_seed_service(spec),
        stateful_sets=stateful_sets,
        disruption_budgets=disruption_budgets,
    )


def build_all(specs: List[ClusterSpec], cfg: Optional[BuildConfig] = None) -> List[ConstructedObjects]:
    return [build_datacenter(spec, cfg) for spec in specs]
