"""Custom exceptions for the order management API."""

class OrderServiceError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="Ocurrió un error interno", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class ValidationError(OrderServiceError):
    """Exception raised for invalid input data."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)

class NotFoundError(OrderServiceError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Recurso no encontrado", payload=None):
        super().__init__(message, 404, payload)

class ConflictError(OrderServiceError):
    """Exception raised when a unique key is already taken."""
    def __init__(self, message="El recurso ya existe", payload=None):
        super().__init__(message, 409, payload)

class InsufficientStockError(ConflictError):
    """Raised when an order asks for more units than the product has."""
    def __init__(self, product_name, required, available):
        message = f"Stock insuficiente para {product_name}: se requieren {required}, disponible {available}"
        super().__init__(message, payload={
            'product': product_name,
            'required': required,
            'available': available
        })

class TerminalStateError(OrderServiceError):
    """Raised when mutating an order that reached a terminal status."""
    def __init__(self, message="El pedido está en un estado final y no puede modificarse"):
        super().__init__(message, 403)
