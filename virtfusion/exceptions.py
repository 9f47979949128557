# virtfusion/exceptions.py

class VirtFusionError(Exception):
    """Base exception for virtfusion operations"""
    pass

class ConfigurationError(VirtFusionError):
    """Raised when the provider configuration is incomplete or invalid"""

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))

class RecordError(VirtFusionError):
    """Raised when a record does not match its kind's field table"""
    pass

class TransportError(VirtFusionError):
    """Raised when a request cannot be built or sent"""
    pass

class DecodeError(VirtFusionError):
    """Raised when a response body is not the JSON the adapter expected"""

    def __init__(self, message: str, status_code: int = None, body: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

class APIError(VirtFusionError):
    """Raised when the API answers with a status the operation does not accept"""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

class ValidationError(APIError):
    """Raised on HTTP 422; carries the server's `errors` payload"""

    def __init__(self, message: str, errors, status_code: int = 422, body: str = ""):
        super().__init__(f"{message}: {errors}", status_code, body)
        self.errors = errors

class UnexpectedStatusError(APIError):
    """Raised on any other non-2xx response"""
    pass

class ResourceNotFoundError(VirtFusionError):
    """Raised when a resource cannot be found"""
    pass

class RollbackError(VirtFusionError):
    """Raised when rollback operations fail"""
    pass
