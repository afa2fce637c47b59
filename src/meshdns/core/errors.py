"""Exception hierarchy for mesh DNS integration.

Every failure of a configure or restore call surfaces as one of these. None
of them is retried here; callers may re-run the whole operation.
"""


class MeshDNSError(Exception):
    """Base exception for all mesh DNS errors.

    Attributes:
        message: Human-readable error description
        help_text: Optional actionable guidance for resolving the error
    """

    def __init__(self, message: str, help_text: str | None = None):
        self.message = message
        self.help_text = help_text
        super().__init__(message)

    def __str__(self) -> str:
        if self.help_text:
            return f"{self.message}\n\nHelp: {self.help_text}"
        return self.message


class UnsupportedVersionError(MeshDNSError):
    """CoreDNS is installed but its version cannot be patched."""

    def __init__(self, image: str, version: str | None = None):
        self.image = image
        self.version = version
        detail = f"version {version}" if version else "an unparseable version"
        super().__init__(
            f"CoreDNS image {image!r} has {detail}, which is not supported",
            help_text="Supported CoreDNS versions are >= 1.3.0 and < 1.12.0",
        )


class NoKnownProviderError(MeshDNSError):
    """Neither CoreDNS nor KubeDNS was found."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(
            f"no known DNS provider found in namespace {namespace!r}",
            help_text="Expected a 'coredns' or 'kube-dns' deployment",
        )


class MissingResourceError(MeshDNSError):
    """A required Kubernetes object does not exist."""

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f"{kind} {namespace}/{name} not found")


class MalformedDataError(MeshDNSError):
    """Stored configuration data could not be decoded."""


class APIFailureError(MeshDNSError):
    """The Kubernetes API call failed (conflict, forbidden, unavailable...)."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)

    @property
    def is_conflict(self) -> bool:
        return self.status == 409
