from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from dse_manifests.core.exceptions import ParseError
from dse_manifests.models.spec import ClusterSpec


SUPPORTED_KINDS = {"DseDatacenter"}


def parse_files(paths: List[str]) -> List[ClusterSpec]:
    specs: List[ClusterSpec] = []

    for p in paths:
        path = Path(p)
        if not path.exists():
            raise ParseError(f"File not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                docs = list(yaml.safe_load_all(f))
        except yaml.YAMLError as e:  # noqa: BLE001
            raise ParseError(f"YAML parse error in {path}: {e}") from e

        for doc in docs:
            if not doc or not isinstance(doc, dict):
                continue
            kind = doc.get("kind")
            # other kinds may share the file; a bare spec document has no kind
            if kind is not None and kind not in SUPPORTED_KINDS:
                continue
            specs.append(_parse_datacenter(doc, path))

    return specs


def _parse_datacenter(doc: Dict[str, Any], path: Path) -> ClusterSpec:
    meta = doc.get("metadata", {}) or {}
    spec = dict(doc.get("spec", {}) or {})
    name = meta.get("name", "unnamed")

    fields: Dict[str, Any] = {**spec, "name": meta.get("name")}
    if meta.get("namespace"):
        fields["namespace"] = meta["namespace"]
    # the progress label lives in spec.labels; metadata.labels belong to the platform object
    fields["labels"] = spec.get("labels") or {}
    if meta.get("resourceVersion") is not None:
        fields["resourceVersion"] = str(meta["resourceVersion"])

    try:
        return ClusterSpec.model_validate(fields)
    except ValidationError as e:
        raise ParseError(f"Invalid datacenter {name!r} in {path}: {e}") from e
