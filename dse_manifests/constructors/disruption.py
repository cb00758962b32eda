from __future__ import annotations

from dse_manifests.constructors.labels import datacenter_labels
from dse_manifests.models.objects import (
    LabelSelector,
    ObjectMeta,
    PodDisruptionBudget,
    PodDisruptionBudgetSpec,
    StatefulSet,
)
from dse_manifests.models.spec import ClusterSpec


MAX_UNAVAILABLE = 1


def build_disruption_budget(spec: ClusterSpec, stateful_set: StatefulSet) -> PodDisruptionBudget:
    # Selects every rack of the datacenter, so at most one pod of the whole
    # datacenter is voluntarily down at a time.
    labels = datacenter_labels(spec)
    return PodDisruptionBudget(
        metadata=ObjectMeta(
            name=f"{stateful_set.metadata.name}-pdb",
            namespace=stateful_set.metadata.namespace,
            labels=labels,
        ),
        spec=PodDisruptionBudgetSpec(
            selector=LabelSelector(match_labels=labels),
            max_unavailable=MAX_UNAVAILABLE,
        ),
    )
