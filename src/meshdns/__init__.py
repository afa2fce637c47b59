"""Mesh DNS integration for CoreDNS and KubeDNS."""

__version__ = "0.1.0"
