"""
Operator progress label.

The progress label on a datacenter object tells observers whether the operator is
still rolling changes out. It is machine read, so only ProgressStatus members are
ever written, and a write only happens when the value actually changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, Union

from dse_manifests.constructors.labels import PROGRESS_LABEL
from dse_manifests.models.spec import ClusterSpec
from dse_manifests.utils.logger import get_logger


class ProgressStatus(str, Enum):
    updating = "Updating"
    ready = "Ready"


class ApplyClient(Protocol):
    """
    The piece of the platform client this module needs.

    update persists a full replacement of the object and raises on failure,
    typically PersistenceError or UpdateConflictError.
    """

    def update(self, obj: ClusterSpec) -> None: ...


@dataclass
class ReconciliationContext:
    client: ApplyClient
    cluster: ClusterSpec
    logger: logging.Logger = field(default_factory=lambda: get_logger(__name__))


def with_progress_label(
    spec: ClusterSpec, status: Union[ProgressStatus, str]
) -> Optional[ClusterSpec]:
    """
    Return a copy of spec carrying the progress label, or None when it already does.

    Raises ValueError for anything that is not a ProgressStatus value.
    """
    value = ProgressStatus(status).value
    if spec.labels.get(PROGRESS_LABEL) == value:
        return None
    return spec.model_copy(update={"labels": {**spec.labels, PROGRESS_LABEL: value}})


def set_progress_label(rc: ReconciliationContext, status: Union[ProgressStatus, str]) -> ClusterSpec:
    """
    Make sure the datacenter carries the progress label, writing at most once.

    On success the context holds the written spec. Errors from the client are
    logged and re-raised untouched; the context then keeps the previous spec.
    """
    updated = with_progress_label(rc.cluster, status)
    if updated is None:
        # no need to ping the platform
        return rc.cluster

    value = updated.labels[PROGRESS_LABEL]
    try:
        rc.client.update(updated)
    except Exception:
        rc.logger.error(
            "error updating label %s=%s on datacenter %s",
            PROGRESS_LABEL,
            value,
            rc.cluster.name,
            exc_info=True,
            extra={"label": PROGRESS_LABEL, "value": value},
        )
        raise

    rc.logger.info("set label %s=%s on datacenter %s", PROGRESS_LABEL, value, rc.cluster.name)
    rc.cluster = updated
    return updated
