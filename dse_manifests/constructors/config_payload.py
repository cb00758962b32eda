from __future__ import annotations

import json
from typing import Any, Dict, Mapping

from dse_manifests.core.exceptions import ConfigSerializationError
from dse_manifests.models.spec import ClusterSpec


def model_values(spec: ClusterSpec) -> Dict[str, Any]:
    # seeds point at the seed service so the server config never changes when seeds move
    return {
        "cluster-info": {
            "name": spec.cluster_name,
            "seeds": spec.seed_service_name(),
        },
        "datacenter-info": {
            "name": spec.name,
        },
    }


def merge_config(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep merge; nested mappings merge, any other value in override wins."""
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = value
    return merged


def serialize_config(spec: ClusterSpec) -> str:
    """Render the payload handed to the config init container as CONFIG_FILE_DATA."""
    payload = merge_config(model_values(spec), spec.config or {})
    try:
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise ConfigSerializationError(
            f"config for datacenter {spec.name!r} cannot be serialized: {e}"
        ) from e
