"""Active filter step applied on top of search matching.

Active filters are the dropdown selections a user has made (category, brand,
color, ...). They are passed in explicitly by the caller and combined with
AND: a product must equal every selected value.
"""

import datetime
from typing import Callable, Iterable, Mapping

from ..products import Product, field_text, product_storage, supplier_name


# Filter field -> product value accessor
FILTER_FIELDS: dict[str, Callable[[Product], str]] = {
    "category": lambda p: field_text(p, "category"),
    "brand": lambda p: field_text(p, "brand"),
    "color": lambda p: field_text(p, "color"),
    "storage": product_storage,
    "region": lambda p: field_text(p, "region"),
    "date": lambda p: field_text(p, "date"),
    "supplier": supplier_name,
}

# Dropdown value meaning "no filter"
ALL_VALUES = "all"


def _selected(active_filters: Mapping[str, str | None]) -> dict[str, str]:
    """Drop empty and "all" selections, lowercase the rest."""
    unknown = set(active_filters) - set(FILTER_FIELDS)
    if unknown:
        raise ValueError(f"Unknown filter field(s): {', '.join(sorted(unknown))}")

    selected = {}
    for field, value in active_filters.items():
        if value is None:
            continue
        value = value.strip().lower()
        if value and value != ALL_VALUES:
            selected[field] = value
    return selected


def apply_active_filters(
    products: Iterable[Product],
    active_filters: Mapping[str, str | None] | None,
) -> list[Product]:
    """Keep products that equal every active filter value.

    Comparison is case-insensitive and ignores surrounding whitespace.

    Args:
        products: Products, usually already filtered by the search term
        active_filters: Field name -> selected value

    Returns:
        Products passing every filter, in input order

    Raises:
        ValueError: If a filter field is not one of FILTER_FIELDS
    """
    selected = _selected(active_filters or {})
    if not selected:
        return list(products)

    return [
        product for product in products
        if all(
            FILTER_FIELDS[field](product).strip().lower() == value
            for field, value in selected.items()
        )
    ]


def pick_default_date(available_dates: list[str], today: datetime.date | None = None) -> str | None:
    """Pick the price-list date to show when none is selected.

    Dates are "DD-MM" strings, most recent first. Today's list wins when it
    exists, otherwise the most recent one.
    """
    if not available_dates:
        return None
    today = today or datetime.date.today()
    today_str = today.strftime("%d-%m")
    if today_str in available_dates:
        return today_str
    return available_dates[0]
