# billing/services/items.py

from decimal import Decimal
from typing import Callable, Iterable, List, Mapping, Optional

from billing.config import ALLOWED_GST_RATES, Settings, get_settings
from billing.errors import ItemResolutionError
from billing.models.invoices import LineItemIn, ResolvedItem
from billing.services.totals import round_money, round_quantity

DEFAULT_UNIT = "PCS"

CatalogLookup = Callable[[int], Optional[Mapping]]


def _first(*values):
    for value in values:
        if value not in (None, ""):
            return value
    return None


class ItemResolver:
    """
    Turns raw line items into priced items.

    Explicit values on the line always win over catalog defaults. A line
    that references a product which no longer exists is resolved from its
    own fields.
    """

    def __init__(self, lookup: CatalogLookup, settings: Settings = None):
        self.lookup = lookup
        self.settings = settings or get_settings()

    def resolve_all(self, raw_items: Iterable[LineItemIn]) -> List[ResolvedItem]:
        return [self.resolve(raw, position) for position, raw in enumerate(raw_items, start=1)]

    def resolve(self, raw: LineItemIn, position: int = 1) -> ResolvedItem:
        quantity = Decimal("1") if raw.quantity is None else round_quantity(raw.quantity)
        if quantity <= 0:
            raise ItemResolutionError(f"Item {position}: quantity must be a positive number")

        catalog = self.lookup(raw.product) if raw.product is not None else None
        catalog = catalog or {}

        return ResolvedItem(
            product_id=raw.product,
            product_name=_first(raw.product_name, raw.description, catalog.get("name"), raw.name),
            hsn_code=_first(raw.hsn_code, raw.part_no, catalog.get("hsn_code")) or "",
            quantity=quantity,
            unit=_first(raw.unit, catalog.get("unit")) or DEFAULT_UNIT,
            price=self._unit_price(raw, position),
            gst_rate=self._gst_rate(raw, catalog, position),
            processes=raw.processes,
            tool=raw.tool,
        )

    def _unit_price(self, raw: LineItemIn, position: int) -> Decimal:
        # process sub-charges replace the flat price
        if raw.processes:
            price = sum((p.price for p in raw.processes), Decimal("0"))
        else:
            price = raw.price if raw.price is not None else Decimal("0")

        if price < 0:
            raise ItemResolutionError(f"Item {position}: price cannot be negative")
        return round_money(price)

    def _gst_rate(self, raw: LineItemIn, catalog: Mapping, position: int) -> Decimal:
        explicit = raw.gst_rate if raw.gst_rate is not None else raw.tax_rate
        if explicit is not None:
            if explicit not in ALLOWED_GST_RATES:
                allowed = ", ".join(str(r) for r in sorted(ALLOWED_GST_RATES))
                raise ItemResolutionError(
                    f"Item {position}: GST rate {explicit} is not one of {allowed}"
                )
            return explicit

        if catalog.get("gst_rate") is not None:
            return Decimal(catalog["gst_rate"])
        return self.settings.default_gst_rate
