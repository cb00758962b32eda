from __future__ import annotations

import json

import pytest

from dse_manifests.constructors.labels import DATACENTER_LABEL, RACK_LABEL, derive_labels
from dse_manifests.constructors.statefulset import build_stateful_set, plan_storage
from dse_manifests.core.config import BuildConfig
from dse_manifests.core.exceptions import ConfigSerializationError
from dse_manifests.models.spec import ClusterSpec, Rack, ResourceRequirements, StorageClaim


def _spec(**overrides) -> ClusterSpec:
    fields = dict(
        name="dc1",
        cluster_name="demo",
        version="6.8.4",
        racks=[Rack(name="rack1", replicas=3), Rack(name="rack2", replicas=3)],
    )
    fields.update(overrides)
    return ClusterSpec(**fields)


def _storage(**overrides) -> StorageClaim:
    fields = dict(
        storage_class_name="fast-ssd",
        resources=ResourceRequirements(requests={"storage": "20Gi"}),
    )
    fields.update(overrides)
    return StorageClaim(**fields)


def _env(container) -> dict:
    return {e.name: e for e in container.env}


def test_demo_rack_ports_and_probes():
    sts = build_stateful_set("rack1", _spec(), 3)
    assert sts.metadata.name == "demo-dc1-rack1-sts"
    assert sts.spec.replicas == 3
    assert sts.spec.service_name == "demo-dc1-service"

    containers = sts.spec.template.spec.containers
    assert len(containers) == 1
    dse = containers[0]
    assert {p.container_port for p in dse.ports} == {9042, 8609, 7000, 7001, 8080}
    assert {p.name for p in dse.ports} == {
        "native",
        "inter-node-msg",
        "intra-node",
        "tls-intra-node",
        "mgmt-api-http",
    }

    live = dse.liveness_probe
    assert live.http_get.port == 8080
    assert live.http_get.path == "/api/v0/probes/liveness"
    assert (live.initial_delay_seconds, live.period_seconds) == (15, 15)

    ready = dse.readiness_probe
    assert ready.http_get.port == 8080
    assert ready.http_get.path == "/api/v0/probes/readiness"
    assert (ready.initial_delay_seconds, ready.period_seconds) == (20, 10)


def test_selector_matches_template_labels():
    for rack in ("rack1", "rack2"):
        sts = build_stateful_set(rack, _spec(), 3)
        assert sts.spec.selector.match_labels == sts.spec.template.metadata.labels
        assert sts.spec.selector.match_labels == derive_labels(_spec(), rack).rack
        assert sts.metadata.labels == sts.spec.template.metadata.labels


def test_ordered_startup_identity_and_service_account():
    pod = build_stateful_set("rack1", _spec(), 3).spec.template.spec
    assert build_stateful_set("rack1", _spec(), 3).spec.pod_management_policy == "OrderedReady"
    ctx = pod.security_context
    assert (ctx.run_as_user, ctx.run_as_group, ctx.fs_group) == (999, 999, 999)
    assert pod.service_account_name == "dse-operator"


def test_affinity_is_preferred_only():
    affinity = build_stateful_set("rack1", _spec(), 3).spec.template.spec.affinity

    (same_zone,) = affinity.pod_affinity.preferred_during_scheduling_ignored_during_execution
    assert same_zone.weight == 100
    assert same_zone.pod_affinity_term.label_selector.match_labels == {RACK_LABEL: "rack1"}
    assert same_zone.pod_affinity_term.topology_key == "topology.kubernetes.io/zone"

    (other_host,) = affinity.pod_anti_affinity.preferred_during_scheduling_ignored_during_execution
    assert other_host.weight == 90
    assert other_host.pod_affinity_term.label_selector.match_labels == {DATACENTER_LABEL: "dc1"}
    assert other_host.pod_affinity_term.topology_key == "kubernetes.io/hostname"

    manifest = build_stateful_set("rack1", _spec(), 3).to_manifest()
    pod_affinity = manifest["spec"]["template"]["spec"]["affinity"]
    assert "requiredDuringSchedulingIgnoredDuringExecution" not in pod_affinity["podAffinity"]


def test_config_init_container_env():
    spec = _spec(config={"cassandra-yaml": {"num_tokens": 16}})
    pod = build_stateful_set("rack1", spec, 3).spec.template.spec
    (init,) = pod.init_containers
    env = _env(init)

    payload = json.loads(env["CONFIG_FILE_DATA"].value)
    assert payload["cassandra-yaml"] == {"num_tokens": 16}
    assert payload["cluster-info"]["name"] == "demo"
    assert env["POD_IP"].value_from.field_ref.field_path == "status.podIP"
    assert (
        env["RACK_NAME"].value_from.field_ref.field_path
        == f"metadata.labels['{RACK_LABEL}']"
    )
    assert env["RACK_NAME"].value is None
    assert env["DSE_VERSION"].value == "6.8.4"

    # shared with the server through a pod-local volume
    (config_volume,) = pod.volumes
    assert config_volume.name == "dse-config"
    assert config_volume.empty_dir is not None
    assert [m.mount_path for m in init.volume_mounts] == ["/config"]


def test_server_container_env_and_image():
    dse = build_stateful_set("rack1", _spec(), 3).spec.template.spec.containers[0]
    env = _env(dse)
    assert env["DS_LICENSE"].value == "accept"
    assert env["DSE_AUTO_CONF_OFF"].value == "all"
    assert dse.image == "datastax/dse-server:6.8.4"


def test_images_follow_build_config_and_spec_repository():
    cfg = BuildConfig(config_builder_image="mirror/config-builder:1", default_repository="mirror/dse")
    pod = build_stateful_set("rack1", _spec(), 1, cfg).spec.template.spec
    assert pod.init_containers[0].image == "mirror/config-builder:1"
    assert pod.containers[0].image == "mirror/dse:6.8.4"

    own_repo = _spec(repository="registry.local/dse-server")
    pod = build_stateful_set("rack1", own_repo, 1, cfg).spec.template.spec
    assert pod.containers[0].image == "registry.local/dse-server:6.8.4"


def test_without_storage_claim_data_is_ephemeral():
    sts = build_stateful_set("rack1", _spec(), 3)
    assert not sts.spec.volume_claim_templates
    mounts = sts.spec.template.spec.containers[0].volume_mounts
    assert [m.mount_path for m in mounts] == ["/config"]
    assert "volumeClaimTemplates" not in sts.to_manifest()["spec"]


def test_with_storage_claim_one_template_per_rack():
    spec = _spec(storage_claim=_storage(access_mode="ReadWriteOnce"))
    sts = build_stateful_set("rack2", spec, 3)

    (claim,) = sts.spec.volume_claim_templates
    assert claim.metadata.name == "dse-data"
    assert claim.metadata.labels == derive_labels(spec, "rack2").rack
    assert claim.spec.access_modes == ["ReadWriteOnce"]
    assert claim.spec.resources.requests == {"storage": "20Gi"}
    assert claim.spec.storage_class_name == "fast-ssd"

    mounts = {m.name: m.mount_path for m in sts.spec.template.spec.containers[0].volume_mounts}
    assert mounts == {"dse-config": "/config", "dse-data": "/var/lib/cassandra"}


def test_storage_plan_honours_access_mode():
    spec = _spec(storage_claim=_storage(access_mode="ReadWriteOncePod"))
    plan = plan_storage(spec, derive_labels(spec, "rack1").rack)
    assert plan.claim_template.spec.access_modes == ["ReadWriteOncePod"]


def test_statefulset_is_deterministic():
    spec = _spec(storage_claim=_storage(), config={"b": 1, "a": {"z": 2, "y": 3}})
    first = build_stateful_set("rack1", spec, 3).model_dump_json()
    second = build_stateful_set("rack1", spec, 3).model_dump_json()
    assert first == second


@pytest.mark.parametrize("bad", [float("nan"), {1, 2}, object()])
def test_unserializable_config_fails_every_rack(bad):
    spec = _spec(config={"cassandra-yaml": {"broken": bad}})
    for rack in spec.racks:
        with pytest.raises(ConfigSerializationError):
            build_stateful_set(rack.name, spec, rack.replicas)


def test_too_deeply_nested_config_fails_every_rack():
    deep: dict = {}
    cur = deep
    for _ in range(100_000):
        cur["x"] = {}
        cur = cur["x"]
    spec = _spec(config={"cassandra-yaml": deep})
    for rack in spec.racks:
        with pytest.raises(ConfigSerializationError):
            build_stateful_set(rack.name, spec, rack.replicas)
