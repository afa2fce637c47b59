"""KubeDNS stub domain configuration."""

from meshdns.core.kubedns.configurator import KubeDNSConfigurator

__all__ = ["KubeDNSConfigurator"]
