from __future__ import annotations

from dataclasses import dataclass

from dse_manifests.models.spec import DEFAULT_REPOSITORY


DEFAULT_CONFIG_BUILDER_IMAGE = "datastax/dse-server-config-builder:7.0.0-3e8847c"

ENV_CONFIG_BUILDER_IMAGE = "DSE_MANIFESTS_CONFIG_BUILDER_IMAGE"
ENV_REPOSITORY = "DSE_MANIFESTS_REPOSITORY"


@dataclass(slots=True)
class BuildConfig:
    """Operator-level settings that are not part of any one datacenter's spec."""

    config_builder_image: str = DEFAULT_CONFIG_BUILDER_IMAGE
    default_repository: str = DEFAULT_REPOSITORY
