"""Kubernetes integration for mesh DNS."""

from meshdns.core.k8s.client import K8sClient

__all__ = ["K8sClient"]
