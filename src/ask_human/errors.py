"""
Error taxonomy for the IPC broker and the fallback launcher.

Socket-layer errors (IpcError and subclasses) never reach the caller of
create_popup; they only trigger the fallback path. Launcher errors
(PopupError and subclasses) are the final, user-visible failure.
"""


class AskHumanError(Exception):
    """Base exception for all ask-human failures."""

    pass


class IpcError(AskHumanError):
    """Base exception for the local-socket request/response layer."""

    pass


class IpcConnectionError(IpcError, ConnectionError):
    """Raised when the UI socket cannot be reached or the connection breaks."""

    pass


class ConnectionClosedError(IpcConnectionError):
    """Raised when the peer closes the connection without answering."""

    pass


class ProtocolError(IpcError):
    """Raised when a protocol line is not valid request/response JSON."""

    pass


class IpcTimeoutError(IpcError, TimeoutError):
    """Raised when no response line arrives within the client timeout."""

    pass


class IpcResponseError(IpcError):
    """Raised when the UI process answers with success=false."""

    pass


class CancellationError(IpcError):
    """Raised when a resolver is dropped before an answer is delivered."""

    pass


class NothingPendingError(IpcError):
    """Raised when an answer is delivered but no request is waiting."""

    pass


class MismatchError(IpcError):
    """Raised when an answer names a request id other than the pending one."""

    def __init__(self, expected_id: str, request_id: str) -> None:
        self.expected_id = expected_id
        self.request_id = request_id
        super().__init__(
            f"Request id mismatch: pending '{expected_id}', got '{request_id}'"
        )


class UnsupportedPlatformError(IpcError, NotImplementedError):
    """Raised when the platform has no local socket transport."""

    pass


class PopupError(AskHumanError):
    """Base exception for the fallback launcher."""

    pass


class ConfigurationError(PopupError):
    """Raised when no UI executable can be located."""

    pass


class ProcessError(PopupError):
    """Raised when the UI executable exits with a nonzero status."""

    def __init__(self, returncode: int, stderr: str) -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"UI process failed: {stderr}")
