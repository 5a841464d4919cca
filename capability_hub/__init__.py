"""Capability hub.

Discovers capability definitions (workloads, traits and scopes) from remote
centers, installs them into a cluster and assembles application documents
from the installed set.
"""

__version__ = "0.1.0"
