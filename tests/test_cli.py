# SPDX-License-Identifier: MIT
# SPDX-FileCopyrightText: The wildfly-jar-enricher contributors
"""Tests for the command-line interface."""

import textwrap
from pathlib import Path

import yaml
from click.testing import CliRunner

from wildfly_jar_enricher.cli import main

MANIFESTS_YAML = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: my-app
spec:
  template:
    spec:
      containers:
        - name: app
          image: {{image}}
---
apiVersion: v1
kind: Service
metadata:
  name: my-svc
spec:
  selector:
    app: my-app
"""

CONFIG_TOML = """\
[[plugins]]
group_id = "org.wildfly.plugins"
artifact_id = "wildfly-jar-maven-plugin"

[plugins.configuration.cloud]
jgroups-ping-protocol = "dns.DNS_PING"

[variables]
image = "registry/app:1.0"
"""


def _setup(tmp_path: Path, config: str = CONFIG_TOML) -> tuple[Path, Path]:
    manifests = tmp_path / "manifests.yaml"
    manifests.write_text(MANIFESTS_YAML)
    config_path = tmp_path / "enricher.toml"
    config_path.write_text(textwrap.dedent(config))
    return manifests, config_path


def test_cli_writes_enriched_stream_to_stdout(tmp_path: Path) -> None:
    manifests, config_path = _setup(tmp_path)

    result = CliRunner().invoke(main, ["-c", str(config_path), "-i", str(manifests)])

    assert result.exit_code == 0, result.output
    deployment, service, ping = yaml.safe_load_all(result.stdout)
    container = deployment["spec"]["template"]["spec"]["containers"][0]
    assert container["image"] == "registry/app:1.0"
    assert container["env"] == [
        {"name": "KUBERNETES_DNS_PING_SERVICE_NAME", "value": "my-svc-ping"}
    ]
    assert ping["metadata"]["name"] == "my-svc-ping"
    assert ping["spec"]["selector"] == service["spec"]["selector"]


def test_cli_mode_option_overrides_config(tmp_path: Path) -> None:
    manifests, config_path = _setup(tmp_path, 'platform = "kubernetes"\n' + CONFIG_TOML)

    result = CliRunner().invoke(
        main, ["-c", str(config_path), "-i", str(manifests), "--mode", "openshift"]
    )

    assert result.exit_code == 0, result.output
    deployment = next(yaml.safe_load_all(result.stdout))
    env = deployment["spec"]["template"]["spec"]["containers"][0]["env"]
    assert env[0]["name"] == "OPENSHIFT_DNS_PING_SERVICE_NAME"


def test_cli_writes_output_dir(tmp_path: Path) -> None:
    manifests, config_path = _setup(tmp_path)
    output_dir = tmp_path / "output"

    result = CliRunner().invoke(
        main,
        [
            "-c",
            str(config_path),
            "-i",
            str(manifests),
            "-o",
            str(output_dir),
            "-n",
            "apps",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Wrote 3 manifest(s)" in result.output
    ping = yaml.safe_load((output_dir / "apps" / "service-my-svc-ping.yaml").read_text())
    assert ping["spec"]["clusterIP"] == "None"
    assert ping["metadata"]["namespace"] == "apps"


def test_cli_without_config_leaves_manifests_unchanged(tmp_path: Path) -> None:
    manifests = tmp_path / "manifests.yaml"
    manifests.write_text(MANIFESTS_YAML.replace("{{image}}", "app:latest"))

    result = CliRunner().invoke(main, ["-i", str(manifests)])

    assert result.exit_code == 0, result.output
    resources = list(yaml.safe_load_all(result.stdout))
    assert [r["kind"] for r in resources] == ["Deployment", "Service"]


def test_cli_missing_config(tmp_path: Path) -> None:
    manifests, _ = _setup(tmp_path)

    result = CliRunner().invoke(
        main, ["-c", str(tmp_path / "missing.toml"), "-i", str(manifests)]
    )

    assert result.exit_code == 1
    assert "Error: Configuration file not found" in result.output


def test_cli_invalid_config(tmp_path: Path) -> None:
    manifests, config_path = _setup(tmp_path, 'platform = "mesos"\n')

    result = CliRunner().invoke(main, ["-c", str(config_path), "-i", str(manifests)])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_cli_rejects_output_dir_containing_input(tmp_path: Path) -> None:
    manifests_dir = tmp_path / "k8s"
    manifests_dir.mkdir()
    app = manifests_dir / "app.yaml"
    app.write_text(MANIFESTS_YAML.replace("{{image}}", "app:latest"))

    result = CliRunner().invoke(
        main, ["-i", str(manifests_dir), "-o", str(manifests_dir)]
    )

    assert result.exit_code == 1
    assert "must not contain the input" in result.output
    assert app.read_text() == MANIFESTS_YAML.replace("{{image}}", "app:latest")


def test_cli_rejects_output_dir_above_input(tmp_path: Path) -> None:
    manifests = tmp_path / "manifests.yaml"
    manifests.write_text(MANIFESTS_YAML.replace("{{image}}", "app:latest"))

    result = CliRunner().invoke(main, ["-i", str(manifests), "-o", str(tmp_path)])

    assert result.exit_code == 1
    assert manifests.exists()
