"""
Error hierarchy for cluster routing and backend transport.

Every error raised towards a caller carries enough context (host, operation)
to tell which backend failed and what it was asked to do.
"""

from typing import List, Optional


class SearchClusterError(Exception):
    """Base class for all search cluster errors."""


class ClusterConfigurationError(SearchClusterError):
    """The configured cluster services or hosts are invalid."""


class NoHostForRoleError(SearchClusterError):
    """No eligible host serves the requested role."""

    def __init__(self, role: str, message: Optional[str] = None):
        self.role = role
        super().__init__(
            message or f"Search cluster has no available host with role '{role}'."
        )


class NoWritableHostError(NoHostForRoleError):
    """Reindex found zero writable hosts, or every writable host failed."""

    def __init__(self, message: Optional[str] = None):
        super().__init__("write", message)


class NoReadableHostError(NoHostForRoleError):
    """Search had no readable host to try."""

    def __init__(self, message: Optional[str] = None):
        super().__init__("read", message)


class TransportError(SearchClusterError):
    """A backend host could not be reached or the HTTP exchange failed."""

    def __init__(self, message: str, host: str = "", operation: str = ""):
        self.host = host
        self.operation = operation
        super().__init__(f"{message} (host={host}, operation={operation})")


class BackendStatusError(TransportError):
    """The backend answered with a non-success HTTP status."""

    def __init__(
        self,
        status_code: int,
        body: str = "",
        host: str = "",
        operation: str = "",
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Search backend returned HTTP {status_code}", host=host, operation=operation
        )


class QuerySyntaxError(BackendStatusError):
    """The backend rejected the query text as syntactically invalid."""


class ProtocolError(SearchClusterError):
    """The backend returned a response body that is not valid JSON."""

    def __init__(self, message: str, host: str = "", operation: str = ""):
        self.host = host
        self.operation = operation
        super().__init__(f"{message} (host={host}, operation={operation})")


class ConfigMismatchError(SearchClusterError):
    """The live index configuration does not match the desired one."""

    def __init__(self, differences: List[str], host: str = ""):
        self.differences = differences
        self.host = host
        listing = ", ".join(differences[:10])
        if len(differences) > 10:
            listing += f", ... ({len(differences) - 10} more)"
        super().__init__(
            f"Index configuration on {host or 'backend'} is out of date: {listing}. "
            "Run index initialization to rebuild it."
        )
