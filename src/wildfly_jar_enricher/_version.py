# SPDX-License-Identifier: MIT
# SPDX-FileCopyrightText: The wildfly-jar-enricher contributors
__version__ = "0.1.0"
