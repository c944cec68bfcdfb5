# SPDX-License-Identifier: MIT
# SPDX-FileCopyrightText: The wildfly-jar-enricher contributors
"""Helpers for working with Kubernetes resource documents."""

from collections.abc import Iterator
from enum import Enum


class ResourceVariant(Enum):
    """The kinds of resource the enricher tells apart."""

    SERVICE = "service"
    WORKLOAD = "workload"
    OTHER = "other"


# Kinds whose documents carry a pod template (or are a pod)
WORKLOAD_KINDS = {
    "CronJob",
    "DaemonSet",
    "Deployment",
    "DeploymentConfig",
    "Job",
    "Pod",
    "ReplicaSet",
    "ReplicationController",
    "StatefulSet",
}


def classify(resource: dict) -> ResourceVariant:
    """Map a resource document to its variant based on its kind."""
    kind = resource.get("kind")
    if kind == "Service":
        return ResourceVariant.SERVICE
    if kind in WORKLOAD_KINDS:
        return ResourceVariant.WORKLOAD
    return ResourceVariant.OTHER


def get_name(resource: dict) -> str | None:
    return (resource.get("metadata") or {}).get("name")


def get_selector(service: dict) -> dict[str, str] | None:
    """Return a copy of the pod selector of a Service, None when it has none."""
    selector = (service.get("spec") or {}).get("selector")
    return dict(selector) if selector is not None else None


def iter_services(resources: list[dict]) -> Iterator[dict]:
    for resource in resources:
        if classify(resource) is ResourceVariant.SERVICE:
            yield resource


def pod_spec(workload: dict) -> dict | None:
    """Locate the pod spec of a workload document.

    Pods carry it directly under spec, CronJobs one level deeper under the
    job template, and every other workload kind under spec.template.

    Args:
        workload: A resource document of a workload kind

    Returns:
        The pod spec dict (shared with the document), or None if absent
    """
    spec = workload.get("spec") or {}
    kind = workload.get("kind")
    if kind == "Pod":
        return workload.get("spec")
    if kind == "CronJob":
        spec = ((spec.get("jobTemplate") or {}).get("spec")) or {}
    return (spec.get("template") or {}).get("spec")


def iter_containers(resources: list[dict]) -> Iterator[dict]:
    """Yield every container dict found in the workloads of a resource list.

    Both regular and init containers are visited. The yielded dicts are the
    ones held by the documents, so mutating them mutates the resources.
    """
    for resource in resources:
        if classify(resource) is not ResourceVariant.WORKLOAD:
            continue
        spec = pod_spec(resource)
        if not spec:
            continue
        for key in ("initContainers", "containers"):
            for container in spec.get(key) or []:
                yield container


def add_env(container: dict, name: str, value: str) -> None:
    """Append an environment variable to a container, keeping existing ones."""
    env = container.get("env")
    if env is None:
        env = []
        container["env"] = env
    env.append({"name": name, "value": value})


def build_headless_service(
    name: str,
    selector: dict[str, str] | None,
    ports: list[dict],
    annotations: dict[str, str] | None = None,
    publish_not_ready_addresses: bool = False,
) -> dict:
    """Build a headless Service document (clusterIP None).

    Args:
        name: Service name
        selector: Pod selector, copied, or None to leave it out
        ports: Service ports
        annotations: Optional metadata annotations
        publish_not_ready_addresses: Publish endpoints of pods that are not ready

    Returns:
        The Service document
    """
    metadata: dict = {"name": name}
    if annotations:
        metadata["annotations"] = dict(annotations)

    spec: dict = {
        "ports": [dict(port) for port in ports],
        "clusterIP": "None",
        "publishNotReadyAddresses": publish_not_ready_addresses,
    }
    if selector is not None:
        spec["selector"] = dict(selector)

    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": metadata,
        "spec": spec,
    }
