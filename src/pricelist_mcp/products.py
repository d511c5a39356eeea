"""Field accessors for price-list product records.

Products arrive as plain dicts from the dashboard API. Optional fields may be
missing or None, and the supplier may be either a name string or an object
with a ``name`` key. These helpers are the only place that knows about those
shapes.
"""

from typing import Any

Product = dict[str, Any]


def field_text(product: Product, field: str) -> str:
    """Return a product field as a string, empty when missing or None."""
    value = product.get(field)
    if value is None:
        return ""
    return str(value)


def supplier_name(product: Product) -> str:
    """Resolve the supplier reference to a display name.

    Accepts ``{"supplier": "Loja X"}``, ``{"supplier": {"name": "Loja X"}}``
    and, as a last fallback, a flat ``supplierName`` key.
    """
    supplier = product.get("supplier")
    if isinstance(supplier, str):
        return supplier
    if isinstance(supplier, dict) and supplier.get("name"):
        return str(supplier["name"])
    return field_text(product, "supplierName")


def product_storage(product: Product) -> str:
    """Storage for phones/tablets, capacity for everything else."""
    return field_text(product, "storage") or field_text(product, "capacity")
