"""
Exception hierarchy for depex.

Only invariant violations (NodeNotFoundError) are meant to escape the engine.
Fetch failures are raised by fetchers and absorbed by the engine, which hands
them back to the caller inside an Err result.
"""


class DepexError(Exception):
    """Base class for all depex errors."""


class NodeNotFoundError(DepexError):
    """
    Raised when an operation names a node that is not in the graph.

    This signals a caller/engine desynchronization bug, not a runtime
    condition to recover from.

    Attributes:
        node_id: The id that could not be resolved.
    """

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class FetchError(DepexError):
    """
    Raised when a neighborhood could not be fetched.

    Attributes:
        message: Human-readable error message.
        node_id: Node whose expansion failed, when known.
    """

    def __init__(self, message: str, node_id: str | None = None):
        self.message = message
        self.node_id = node_id
        super().__init__(f"{message} (node: {node_id})" if node_id else message)


class AuthenticationError(FetchError):
    """The backend rejected our credentials."""


class NeighborhoodNotFoundError(FetchError):
    """The backend has no neighborhood for the requested identity."""


class FetchTimeoutError(FetchError):
    """The backend did not answer in time, even after retries."""


class MalformedResponseError(FetchError):
    """The backend answered with something that is not a graph fragment."""


class ConfigError(DepexError):
    """Raised when configuration cannot be loaded or is invalid."""
