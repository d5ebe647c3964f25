class InventoryError(Exception):
    """Error base del dominio de inventario."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(InventoryError):
    """El producto o movimiento referenciado no existe en el almacén de datos."""


class ValidationError(InventoryError):
    """Campo obligatorio ausente o valor fuera de rango (cantidad <= 0, precio < 0...)."""


class InsufficientStock(InventoryError):
    """Una salida, o la reversión de una entrada, dejaría el stock en negativo."""

    def __init__(self, message: str, available: float, requested: float):
        super().__init__(message)
        self.available = available
        self.requested = requested


class StoreUnavailable(InventoryError):
    """El almacén de datos (base de datos o API remota) falló la petición."""
