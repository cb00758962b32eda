from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from dse_manifests.models.spec import ClusterSpec


CLUSTER_LABEL = "com.datastax.dse.cluster"
DATACENTER_LABEL = "com.datastax.dse.datacenter"
RACK_LABEL = "com.datastax.dse.rack"
PROGRESS_LABEL = "com.datastax.dse.operator.progress"


@dataclass(frozen=True, slots=True)
class DerivedLabels:
    """
    The three nested label scopes for one datacenter.

    cluster is contained in datacenter, which is contained in rack. Selectors on
    every constructed object are taken from one of these, so pods and the objects
    selecting them can never disagree.
    """

    cluster: Dict[str, str]
    datacenter: Dict[str, str]
    rack: Optional[Dict[str, str]] = None


def derive_labels(spec: ClusterSpec, rack_name: Optional[str] = None) -> DerivedLabels:
    return DerivedLabels(
        cluster=cluster_labels(spec),
        datacenter=datacenter_labels(spec),
        rack=rack_labels(spec, rack_name) if rack_name is not None else None,
    )


def cluster_labels(spec: ClusterSpec) -> Dict[str, str]:
    return {CLUSTER_LABEL: spec.cluster_name}


def datacenter_labels(spec: ClusterSpec) -> Dict[str, str]:
    return {**cluster_labels(spec), DATACENTER_LABEL: spec.name}


def rack_labels(spec: ClusterSpec, rack_name: str) -> Dict[str, str]:
    return {**datacenter_labels(spec), RACK_LABEL: rack_name}
