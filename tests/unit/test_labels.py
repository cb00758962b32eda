from __future__ import annotations

from dse_manifests.constructors.labels import (
    CLUSTER_LABEL,
    DATACENTER_LABEL,
    RACK_LABEL,
    cluster_labels,
    datacenter_labels,
    derive_labels,
    rack_labels,
)
from dse_manifests.models.spec import ClusterSpec, Rack


def _spec() -> ClusterSpec:
    return ClusterSpec(
        name="dc1",
        cluster_name="demo",
        version="6.8.4",
        racks=[Rack(name="rack1", replicas=3)],
    )


def test_label_scopes():
    labels = derive_labels(_spec(), "rack1")
    assert labels.cluster == {CLUSTER_LABEL: "demo"}
    assert labels.datacenter == {CLUSTER_LABEL: "demo", DATACENTER_LABEL: "dc1"}
    assert labels.rack == {
        CLUSTER_LABEL: "demo",
        DATACENTER_LABEL: "dc1",
        RACK_LABEL: "rack1",
    }


def test_label_hierarchy_is_nested():
    labels = derive_labels(_spec(), "rack1")
    assert labels.cluster.items() <= labels.datacenter.items()
    assert labels.datacenter.items() <= labels.rack.items()


def test_no_rack_scope_without_rack_name():
    labels = derive_labels(_spec())
    assert labels.rack is None
    assert labels == derive_labels(_spec())


def test_scope_helpers_match_derived_labels():
    spec = _spec()
    labels = derive_labels(spec, "rack1")
    assert cluster_labels(spec) == labels.cluster
    assert datacenter_labels(spec) == labels.datacenter
    assert rack_labels(spec, "rack1") == labels.rack
