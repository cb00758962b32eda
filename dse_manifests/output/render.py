from __future__ import annotations

import json
from typing import List

import yaml
from rich.console import Console
from rich.table import Table

from dse_manifests.models.objects import ConstructedObjects
from dse_manifests.utils.units import parse_storage_gb


def render_table(results: List[ConstructedObjects]) -> None:
    console = Console()

    table = Table(title="Constructed Objects")
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("Namespace")
    table.add_column("Selector")
    table.add_column("Detail")

    for result in results:
        for svc in (result.service, result.seed_service):
            ports = ", ".join(f"{p.name}:{p.port}" for p in svc.spec.ports or [])
            table.add_row(
                svc.kind,
                svc.metadata.name or "",
                svc.metadata.namespace or "",
                _selector(svc.spec.selector),
                ports or "no ports, publishes not-ready",
            )
        for sts in result.stateful_sets:
            claims = sts.spec.volume_claim_templates or []
            storage = ", ".join(
                f"{c.metadata.name} {parse_storage_gb(c.spec.resources.requests['storage']):.1f} GB"
                for c in claims
            )
            table.add_row(
                sts.kind,
                sts.metadata.name or "",
                sts.metadata.namespace or "",
                _selector(sts.spec.selector.match_labels),
                f"replicas={sts.spec.replicas} storage={storage or 'ephemeral'}",
            )
        for pdb in result.disruption_budgets:
            table.add_row(
                pdb.kind,
                pdb.metadata.name or "",
                pdb.metadata.namespace or "",
                _selector(pdb.spec.selector.match_labels),
                f"maxUnavailable={pdb.spec.max_unavailable}",
            )

    console.print(table)


def _selector(labels: dict) -> str:
    return ",".join(f"{k}={v}" for k, v in labels.items())


def render_yaml(results: List[ConstructedObjects]) -> str:
    docs = [obj.to_manifest() for result in results for obj in result.all()]
    return yaml.safe_dump_all(docs, sort_keys=False, default_flow_style=False)


def render_json(results: List[ConstructedObjects]) -> str:
    data = [obj.to_manifest() for result in results for obj in result.all()]
    return json.dumps(data, indent=2, sort_keys=True)
