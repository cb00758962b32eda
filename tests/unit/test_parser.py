from __future__ import annotations

from pathlib import Path

import pytest

from dse_manifests.constructors.labels import PROGRESS_LABEL
from dse_manifests.core.exceptions import ParseError
from dse_manifests.parsers.yaml_parser import parse_files


FIXTURES = Path("tests/fixtures")


def test_parse_datacenter_resource():
    (spec,) = parse_files([str(FIXTURES / "datacenter.yaml")])
    assert spec.name == "dc1"
    assert spec.namespace == "dse"
    assert spec.cluster_name == "demo"
    assert spec.version == "6.8.4"
    assert [(r.name, r.replicas) for r in spec.racks] == [("rack1", 3), ("rack2", 3)]
    assert spec.storage_claim.storage_class_name == "fast-ssd"
    assert spec.storage_claim.resources.requests["storage"] == "20Gi"
    assert spec.config["cassandra-yaml"] == {"num_tokens": 16}
    assert spec.labels == {PROGRESS_LABEL: "Ready"}
    assert spec.resource_version == "4711"


def test_bare_spec_and_foreign_kinds():
    (spec,) = parse_files([str(FIXTURES / "ephemeral.yaml")])
    assert spec.name == "dc2"
    assert spec.namespace == "default"
    assert spec.storage_claim is None
    assert spec.server_image() == "registry.local/dse-server:6.8.4"


def test_invalid_datacenter_raises_parse_error():
    with pytest.raises(ParseError) as info:
        parse_files([str(FIXTURES / "invalid.yaml")])
    assert "broken" in str(info.value)


def test_missing_file_and_bad_yaml(tmp_path):
    with pytest.raises(ParseError):
        parse_files([str(tmp_path / "nope.yaml")])
    bad = tmp_path / "bad.yaml"
    bad.write_text("spec: [unclosed\n", encoding="utf-8")
    with pytest.raises(ParseError):
        parse_files([str(bad)])


def test_metadata_labels_stay_off_the_spec(tmp_path):
    doc = tmp_path / "dc.yaml"
    doc.write_text(
        "kind: DseDatacenter\n"
        "metadata:\n"
        "  name: dc3\n"
        "  labels:\n"
        "    com.datastax.dse.operator.progress: Updating\n"
        "    team: storage\n"
        "spec:\n"
        "  clusterName: demo\n"
        "  version: 6.8.4\n"
        "  racks: [{name: rack1}]\n"
        "  labels:\n"
        "    com.datastax.dse.operator.progress: Ready\n",
        encoding="utf-8",
    )
    (spec,) = parse_files([str(doc)])
    assert spec.labels == {PROGRESS_LABEL: "Ready"}
