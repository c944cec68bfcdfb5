# SPDX-License-Identifier: MIT
# SPDX-FileCopyrightText: The wildfly-jar-enricher contributors
"""Headless ping service enrichment for JGroups DNS_PING clustering."""

import logging
from enum import Enum

from wildfly_jar_enricher.config import (
    BOOTABLE_JAR_ARTIFACT_ID,
    BOOTABLE_JAR_GROUP_ID,
    ENRICHER_NAME,
    PluginDescriptor,
    Project,
    Settings,
    find_plugin,
)
from wildfly_jar_enricher.resources import (
    add_env,
    build_headless_service,
    get_name,
    get_selector,
    iter_containers,
    iter_services,
)

logger = logging.getLogger(__name__)

OPENSHIFT_ENV_VAR = "OPENSHIFT_DNS_PING_SERVICE_NAME"
KUBERNETES_ENV_VAR = "KUBERNETES_DNS_PING_SERVICE_NAME"

CLOUD_ELEMENT = "cloud"
PROTOCOL_ELEMENT = "jgroups-ping-protocol"
DNS_PROTOCOL = "dns.DNS_PING"

PING_PORT_NAME = "ping"
# Required by the Service schema; JGroups never dials it
PING_PORT = 8888

PING_SERVICE_ANNOTATIONS = {
    "service.alpha.kubernetes.io/tolerate-unready-endpoints": "true",
    "description": "The JGroups ping port for clustering.",
}


class PlatformMode(Enum):
    """Target platform of the generated manifests."""

    KUBERNETES = "kubernetes"
    OPENSHIFT = "openshift"


def is_applicable(settings: Settings, plugin: PluginDescriptor | None) -> bool:
    """
    Decide whether the ping service should be generated.

    Generation applies when it isn't disabled and the bootable JAR plugin
    configures a cloud jgroups-ping-protocol containing dns.DNS_PING.
    Any missing or malformed piece of configuration means no.

    Args:
        settings: Resolved enricher settings
        plugin: The bootable JAR plugin of the project, or None

    Returns:
        True if enrichment should run
    """
    if settings.disable_service_generation:
        return False
    if plugin is None:
        return False
    cloud = (plugin.configuration or {}).get(CLOUD_ELEMENT)
    if not isinstance(cloud, dict):
        return False
    protocol = cloud.get(PROTOCOL_ELEMENT)
    return isinstance(protocol, str) and DNS_PROTOCOL in protocol


def select_target_service(
    resources: list[dict], explicit_name: str | None = None
) -> tuple[str, dict[str, str] | None] | None:
    """
    Pick the application Service the ping service is created for.

    Without an explicit name the first Service wins; with one, the first
    Service of that name wins wherever it is in the list. A first Service
    without a name means there is no target.

    Args:
        resources: The working set of resource documents
        explicit_name: Name of the application service, if configured

    Returns:
        (service name, selector) of the target, or None if there is none
    """
    for service in iter_services(resources):
        name = get_name(service)
        if explicit_name is None or explicit_name == name:
            if name is None:
                return None
            return name, get_selector(service)
    return None


def derive_ping_service_name(settings: Settings, service_name: str) -> str:
    if settings.ping_service_name:
        return settings.ping_service_name
    return f"{service_name}-ping"


def build_ping_service(name: str, selector: dict[str, str] | None) -> dict:
    """Build the headless Service JGroups DNS_PING resolves cluster members with."""
    return build_headless_service(
        name=name,
        selector=selector,
        ports=[{"name": PING_PORT_NAME, "port": PING_PORT}],
        annotations=PING_SERVICE_ANNOTATIONS,
        # Members must find each other before they pass readiness checks
        publish_not_ready_addresses=True,
    )


class DnsPingEnricher:
    """Adds a DNS ping service and its env var to a WildFly bootable JAR deployment."""

    name = ENRICHER_NAME

    def __init__(self, project: Project, settings: Settings | None = None) -> None:
        self.project = project
        self.settings = settings or Settings()

    def is_available(self) -> bool:
        plugin = find_plugin(
            self.project, BOOTABLE_JAR_GROUP_ID, BOOTABLE_JAR_ARTIFACT_ID
        )
        return is_applicable(self.settings, plugin)

    def create(self, platform_mode: PlatformMode, resources: list[dict]) -> None:
        """
        Enrich the resources in place.

        Every container of every workload gets the ping service name env var,
        and the ping service is appended to the list. Nothing is changed when
        enrichment doesn't apply or there is no target service. Calling it
        twice adds a second ping service.

        Args:
            platform_mode: Platform the manifests are generated for
            resources: Working set of resource documents, mutated in place
        """
        if not self.is_available():
            logger.debug(f"Skipping {self.name}: DNS ping not configured")
            return

        target = select_target_service(
            resources, self.settings.application_service_name
        )
        if target is None:
            logger.error("No service found, can't generate ping service")
            return
        service_name, selector = target

        ping_service_name = derive_ping_service_name(self.settings, service_name)
        env_name = (
            KUBERNETES_ENV_VAR
            if platform_mode is PlatformMode.KUBERNETES
            else OPENSHIFT_ENV_VAR
        )

        for container in list(iter_containers(resources)):
            add_env(container, env_name, ping_service_name)
            logger.debug(
                f"Set {env_name}={ping_service_name} on container "
                f"{container.get('name') or '<unnamed>'}"
            )

        logger.info(
            f"Adding headless service {ping_service_name} for service {service_name}"
        )
        resources.append(build_ping_service(ping_service_name, selector))


def enrich(
    platform_mode: PlatformMode,
    resources: list[dict],
    settings: Settings,
    project: Project,
) -> None:
    """Run the DNS ping enricher once over the resources."""
    DnsPingEnricher(project, settings).create(platform_mode, resources)
