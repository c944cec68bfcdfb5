# SPDX-License-Identifier: MIT
# SPDX-FileCopyrightText: The wildfly-jar-enricher contributors
"""Loading and writing of Kubernetes manifest files."""

import logging
from pathlib import Path

import pystache
import yaml
from pystache.common import MissingTags
from pystache.context import KeyNotFoundError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with a formatter for console output.

    Args:
        verbose: If True, set log level to DEBUG; otherwise INFO
    """
    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S %z",
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _literal_str_representer(dumper: yaml.Dumper, data: str) -> yaml.Node:
    """Represent multi-line strings using literal block scalar (|-) syntax."""
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


# Register the custom representer for multi-line strings
yaml.add_representer(str, _literal_str_representer)

# Kubernetes resource kinds that are cluster-scoped (not namespaced)
CLUSTER_SCOPED_KINDS = {
    "APIService",
    "ClusterRole",
    "ClusterRoleBinding",
    "CustomResourceDefinition",
    "IngressClass",
    "Namespace",
    "Node",
    "PersistentVolume",
    "PriorityClass",
    "RuntimeClass",
    "StorageClass",
    "MutatingWebhookConfiguration",
    "ValidatingWebhookConfiguration",
}

MANIFEST_SUFFIXES = (".yaml", ".yml")


def load_manifests(path: Path, variables: dict[str, str] | None = None) -> list[dict]:
    """
    Load resource documents from a manifest file or a directory of them.

    Directories are read in sorted order. If variables are given, each file is
    rendered as a Mustache template first, and a tag without a value is an
    error. Documents of kind List are replaced by their items.

    Args:
        path: A YAML file, or a directory containing YAML files
        variables: Mustache context for rendering the files

    Returns:
        The resource documents in file order

    Raises:
        FileNotFoundError: If the path doesn't exist or holds no YAML files
        ValueError: If a file isn't valid YAML or a template can't be rendered
    """
    if not path.exists():
        raise FileNotFoundError(f"Manifest path not found: {path}")

    if path.is_dir():
        files = sorted(p for p in path.iterdir() if p.suffix in MANIFEST_SUFFIXES)
        if not files:
            raise FileNotFoundError(f"No YAML files found in {path}")
    else:
        files = [path]

    renderer = pystache.Renderer(missing_tags=MissingTags.strict)
    resources: list[dict] = []
    for manifest_file in files:
        text = manifest_file.read_text()
        if variables is not None:
            try:
                text = renderer.render(text, variables)
            except KeyNotFoundError as e:
                raise ValueError(f"Cannot render {manifest_file}: {e}") from e

        try:
            documents = [doc for doc in yaml.safe_load_all(text) if doc]
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {manifest_file}: {e}") from e

        for doc in documents:
            if not isinstance(doc, dict):
                raise ValueError(f"Expected a YAML mapping in {manifest_file}")
            if doc.get("kind") == "List":
                for item in doc.get("items") or []:
                    if not item:
                        continue
                    if not isinstance(item, dict):
                        raise ValueError(
                            f"Expected a YAML mapping in List items of {manifest_file}"
                        )
                    resources.append(item)
            else:
                resources.append(doc)

        logger.debug(f"Loaded {len(documents)} document(s) from {manifest_file}")

    return resources


def dump_manifests(resources: list[dict]) -> str:
    """Serialize resources as a multi-document YAML stream."""
    return yaml.dump_all(resources, default_flow_style=False, sort_keys=False)


def apply_namespace(resources: list[dict], namespace: str) -> None:
    """Set the namespace of namespaced resources that don't already have one."""
    for doc in resources:
        kind = doc.get("kind")
        if kind and kind not in CLUSTER_SCOPED_KINDS:
            if "namespace" not in doc.get("metadata", {}):
                doc.setdefault("metadata", {})["namespace"] = namespace


def write_manifests(resources: list[dict], output_dir: Path) -> set[Path]:
    """
    Write each resource to its own file.

    Files are named following the pattern: kind-name.yaml, written into
    output_dir/<namespace>/ for namespaced resources or output_dir/cluster/
    for cluster-scoped resources. Namespaced resources without a namespace
    go to output_dir/default/. Resources without kind or name are skipped.

    Args:
        resources: Resource documents to write
        output_dir: Base output directory

    Returns:
        Set of paths written

    Raises:
        ValueError: If two resources would be written to the same file
        OSError: If files cannot be written
    """
    written: set[Path] = set()
    for doc in resources:
        kind = doc.get("kind")
        name = (doc.get("metadata") or {}).get("name")

        if not kind or not name:
            logger.warning(f"Skipping resource without kind or name: {kind} {name}")
            continue

        if kind in CLUSTER_SCOPED_KINDS:
            subdir = "cluster"
        else:
            subdir = doc.get("metadata", {}).get("namespace") or "default"
        dest_dir = output_dir / subdir
        dest_dir.mkdir(parents=True, exist_ok=True)

        filename = f"{kind.lower()}-{name}.yaml"
        output_path = dest_dir / filename
        if output_path in written:
            raise ValueError(
                f"Duplicate resource {kind} '{name}' would overwrite {subdir}/{filename}"
            )

        with open(output_path, "w") as f:
            yaml.dump(doc, f, default_flow_style=False, sort_keys=False)

        logger.debug(f"Wrote {subdir}/{filename}")
        written.add(output_path)

    return written
