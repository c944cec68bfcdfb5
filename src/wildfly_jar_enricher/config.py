# SPDX-License-Identifier: MIT
# SPDX-FileCopyrightText: The wildfly-jar-enricher contributors
"""Configuration parsing and resolution for wildfly-jar-enricher."""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

ENRICHER_NAME = "jkube-dns-ping-wildfly-jar"

BOOTABLE_JAR_GROUP_ID = "org.wildfly.plugins"
BOOTABLE_JAR_ARTIFACT_ID = "wildfly-jar-maven-plugin"

PLATFORMS = ("kubernetes", "openshift")


@dataclass(frozen=True)
class Settings:
    """Resolved options of the DNS ping enricher."""

    disable_service_generation: bool = False
    application_service_name: str | None = None
    ping_service_name: str | None = None


@dataclass
class PluginDescriptor:
    """A build plugin declared by the project, with its configuration."""

    group_id: str
    artifact_id: str
    configuration: dict = field(default_factory=dict)


@dataclass
class Project:
    """The parts of the application project the enricher looks at."""

    plugins: list[PluginDescriptor] = field(default_factory=list)


@dataclass
class EnricherConfig:
    """Everything read from an enricher configuration file."""

    project: Project
    platform: str | None = None
    # enricher name -> option key -> value
    enricher_config: dict[str, dict] = field(default_factory=dict)
    variables: dict[str, str] | None = None

    def settings(self) -> Settings:
        return resolve_settings(self.enricher_config.get(ENRICHER_NAME))


def _as_string(value: object) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _as_boolean(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() == "true"


def resolve_settings(enricher_config: Mapping | None) -> Settings:
    """
    Resolve the enricher options into typed settings.

    Recognised keys are disableServiceGeneration (default false),
    applicationServiceName and pingServiceName (both default unset).
    Unknown keys are ignored and empty strings count as unset.

    Args:
        enricher_config: Options for this enricher, or None when not configured

    Returns:
        Resolved settings
    """
    options = enricher_config or {}
    return Settings(
        disable_service_generation=_as_boolean(
            options.get("disableServiceGeneration")
        ),
        application_service_name=_as_string(options.get("applicationServiceName")),
        ping_service_name=_as_string(options.get("pingServiceName")),
    )


def find_plugin(
    project: Project, group_id: str, artifact_id: str
) -> PluginDescriptor | None:
    """Return the first plugin of the project matching both identifiers."""
    for plugin in project.plugins:
        if plugin.group_id == group_id and plugin.artifact_id == artifact_id:
            return plugin
    return None


def load_config(path: Path) -> EnricherConfig:
    """
    Load the enricher configuration from a TOML file.

    The file may contain a top-level platform key, [[plugins]] tables,
    an [enricher.config.<name>] table per enricher and a [variables] table.

    Args:
        path: Path to the TOML file

    Returns:
        Parsed configuration

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the TOML is invalid or has unexpected structure
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e

    platform = data.get("platform")
    if platform is not None and platform not in PLATFORMS:
        raise ValueError(
            f"Unknown platform '{platform}' in {path}, "
            f"expected one of: {', '.join(PLATFORMS)}"
        )

    plugins = [_parse_plugin(p, path) for p in data.get("plugins", [])]

    enricher_config = (data.get("enricher") or {}).get("config") or {}
    if not isinstance(enricher_config, dict):
        raise ValueError(f"[enricher.config] must be a table in {path}")
    for name, options in enricher_config.items():
        if not isinstance(options, dict):
            raise ValueError(f"[enricher.config.{name}] must be a table in {path}")

    variables = data.get("variables")
    if variables is not None:
        if not isinstance(variables, dict):
            raise ValueError(f"[variables] must be a table in {path}")
        variables = {k: str(v) for k, v in variables.items()}

    return EnricherConfig(
        project=Project(plugins=plugins),
        platform=platform,
        enricher_config=enricher_config,
        variables=variables,
    )


def _parse_plugin(data: dict, source_file: Path) -> PluginDescriptor:
    """Parse a single [[plugins]] entry."""
    for key in ("group_id", "artifact_id"):
        if key not in data:
            raise ValueError(f"Missing required field '{key}' in plugin of {source_file}")

    configuration = data.get("configuration", {})
    if not isinstance(configuration, dict):
        raise ValueError(
            f"Plugin '{data['artifact_id']}' configuration must be a table in {source_file}"
        )

    return PluginDescriptor(
        group_id=data["group_id"],
        artifact_id=data["artifact_id"],
        configuration=configuration,
    )
