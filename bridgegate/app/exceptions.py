"""Custom exceptions for the edge server."""


class BridgeGateException(Exception):
    """Base class for edge server exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code for consistent HTTP response handling.
    """
    status_code: int = 500

    def __init__(self, message: str = "Edge server error"):
        self.message = message
        super().__init__(message)


class UnsupportedChainError(BridgeGateException):
    """Raised when the widget config is asked for a chain outside the static tables.

    This is a deployment defect, not a client error.
    Maps to HTTP 500 Internal Server Error.
    """
    status_code = 500

    def __init__(self, chain_id: int):
        self.chain_id = chain_id
        super().__init__(f"Unsupported chain ID: {chain_id}")


class AssetNotFoundError(BridgeGateException):
    """Raised when the static asset source has no file for a path.

    Maps to HTTP 404 Not Found.
    """
    status_code = 404

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Asset not found: {path}")


class AssetReadError(BridgeGateException):
    """Raised when a required bundle file exists but cannot be read.

    Maps to HTTP 500 Internal Server Error.
    """
    status_code = 500

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Failed to read asset: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
