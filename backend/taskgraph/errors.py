"""Error types for the task graph dashboard.

None of these are fatal to the service. The worst case is a stale or
partially-updated view:
1. SnapshotFetchError - the task list could not be retrieved or parsed
2. ChannelError - the live update stream dropped or refused to open
3. SessionNotReadyError - no dashboard session is available to render from
"""


class DashboardError(Exception):
    """Base exception for dashboard errors."""

    def __init__(self, message: str, retriable: bool = False):
        super().__init__(message)
        self.retriable = retriable


class SnapshotFetchError(DashboardError):
    """Network, HTTP or payload error while fetching a task snapshot."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, retriable=True)
        self.status_code = status_code


class ChannelError(DashboardError):
    """The live update stream failed to connect or was interrupted."""

    def __init__(self, message: str):
        super().__init__(message, retriable=True)


class SessionNotReadyError(DashboardError):
    """No session (or no scene) exists to serve a renderer request."""

    pass
