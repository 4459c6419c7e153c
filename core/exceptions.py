"""
Exceptions raised by the LookUp clients and classifier.
"""


class LookUpError(Exception):
    """Base exception for lookup failures."""

    pass


class UnsupportedNetwork(LookUpError):
    """Raised when a network is not in the catalog."""

    def __init__(self, network: str):
        self.network = network
        super().__init__(f"Unsupported network: {network}")


class InvalidParameter(LookUpError):
    """Raised when a parameter cannot be handled for the requested kind."""

    pass


class RpcError(LookUpError):
    """Raised on transport failure, non-2xx status or a JSON-RPC error envelope."""

    def __init__(self, message: str, method: str = None):
        self.method = method
        super().__init__(message)


class QueryExecutionFailed(LookUpError):
    """Raised when an analytics query execution fails."""

    def __init__(self, message: str, execution_id: str = None):
        self.execution_id = execution_id
        super().__init__(message)


class QueryTimeout(LookUpError):
    """Raised when a query (or one of its HTTP calls) exceeds its deadline."""

    def __init__(self, message: str, execution_id: str = None):
        self.execution_id = execution_id
        super().__init__(message)


class SchemaMismatch(LookUpError):
    """Raised when a result row does not fit the expected schema."""

    pass


class UnresolvedName(LookUpError):
    """Raised when a name has no address record."""

    def __init__(self, name: str, reason: str = None):
        self.name = name
        message = f"Unable to resolve name: {name}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class MetadataFetchError(LookUpError):
    """Raised when token or collection metadata cannot be fetched."""

    pass
