# SPDX-License-Identifier: MIT
# SPDX-FileCopyrightText: The wildfly-jar-enricher contributors
"""Command-line interface for wildfly-jar-enricher."""

import sys
from pathlib import Path

import click

from wildfly_jar_enricher._version import __version__
from wildfly_jar_enricher.config import PLATFORMS, EnricherConfig, Project, load_config
from wildfly_jar_enricher.enricher import DnsPingEnricher, PlatformMode
from wildfly_jar_enricher.manifests import (
    apply_namespace,
    dump_manifests,
    load_manifests,
    setup_logging,
    write_manifests,
)


@click.command()
@click.version_option(version=__version__, prog_name="wildfly-jar-enricher")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Enricher configuration file (TOML)",
)
@click.option(
    "--input",
    "-i",
    "input_path",
    type=click.Path(exists=False, path_type=Path),
    required=True,
    help="Manifest file or directory of manifests to enrich",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Output directory for enriched manifests [default: write to stdout]",
)
@click.option(
    "--mode",
    type=click.Choice(PLATFORMS),
    default=None,
    help="Target platform, overrides the configuration [default: kubernetes]",
)
@click.option(
    "--namespace",
    "-n",
    default=None,
    help="Namespace for resources that don't declare one",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show detailed output",
)
def main(
    config_path: Path | None,
    input_path: Path,
    output_dir: Path | None,
    mode: str | None,
    namespace: str | None,
    verbose: bool,
) -> None:
    """Add a JGroups DNS ping service to WildFly bootable JAR manifests."""
    setup_logging(verbose=verbose)

    try:
        if output_dir is not None and input_path.resolve().is_relative_to(
            output_dir.resolve()
        ):
            raise ValueError(
                f"Output directory {output_dir} must not contain the input {input_path}"
            )

        if config_path is not None:
            config = load_config(config_path)
        else:
            config = EnricherConfig(project=Project())

        platform_mode = PlatformMode(mode or config.platform or "kubernetes")

        if verbose:
            click.echo(f"Configuration file: {config_path}", err=True)
            click.echo(f"Input: {input_path}", err=True)
            click.echo(f"Platform: {platform_mode.value}", err=True)

        resources = load_manifests(input_path, config.variables)

        if verbose:
            click.echo(f"Loaded {len(resources)} resource(s)", err=True)

        enricher = DnsPingEnricher(config.project, config.settings())
        enricher.create(platform_mode, resources)

        if namespace:
            apply_namespace(resources, namespace)

        if output_dir is None:
            click.echo(dump_manifests(resources), nl=False)
        else:
            written_paths = write_manifests(resources, output_dir)
            click.echo(f"✓ Wrote {len(written_paths)} manifest(s) to {output_dir}")

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except RuntimeError as e:
        click.echo(f"Runtime error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
