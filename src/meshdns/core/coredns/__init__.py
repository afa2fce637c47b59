"""CoreDNS Corefile editing and configuration."""

from meshdns.core.coredns.configurator import CoreDNSConfigurator

__all__ = ["CoreDNSConfigurator"]
