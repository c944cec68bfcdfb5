# SPDX-License-Identifier: MIT
# SPDX-FileCopyrightText: The wildfly-jar-enricher contributors
"""Headless DNS ping service enrichment for WildFly bootable JAR manifests."""

from wildfly_jar_enricher._version import __version__

__all__ = ["__version__"]
