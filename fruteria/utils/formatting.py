import datetime


def format_date(value: datetime.date) -> str:
    """Formato de fecha para mostrar: DD/MM/YYYY."""
    return value.strftime("%d/%m/%Y")


def format_currency(amount: float) -> str:
    """Importe en pesos mexicanos, estilo es-MX: $1,234.50"""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_quantity(quantity: float) -> str:
    """Cantidades sin decimales sobrantes: 20.0 -> '20', 1.5 -> '1.5'."""
    return f"{quantity:g}"
