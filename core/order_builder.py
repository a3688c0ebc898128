"""Advisory validation and pricing of an order request.

Nothing here writes. Stock may move before the order is committed; the
transaction in ``core.order_service`` repeats the checks authoritatively.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from core.catalog_service import CatalogEntry, CatalogReader
from core.errors import InsufficientStock, ItemUnavailable, NotFound, ValidationFailure

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize to two decimal places."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineRequest:
    item_id: int
    quantity: int


@dataclass(frozen=True)
class BuiltLine:
    item_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class OrderBuild:
    user_id: int
    lines: List[BuiltLine] = field(default_factory=list)
    total_amount: Decimal = Decimal("0.00")
    special_instructions: Optional[str] = None


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_lines(items: Iterable) -> List[LineRequest]:
    """Accept LineRequest objects, (item_id, quantity) pairs or dicts."""
    if items is None:
        raise ValidationFailure("Order must contain at least one item")

    lines = []
    for raw in items:
        if isinstance(raw, LineRequest):
            item_id, quantity = raw.item_id, raw.quantity
        elif isinstance(raw, dict):
            item_id, quantity = raw.get("item_id"), raw.get("quantity")
        else:
            try:
                item_id, quantity = raw
            except (TypeError, ValueError):
                raise ValidationFailure("Each item must be an (item_id, quantity) pair")

        if not _is_int(item_id):
            raise ValidationFailure("item_id must be an integer", item_id=item_id)
        if not _is_int(quantity) or quantity <= 0:
            raise ValidationFailure(
                f"Quantity for item {item_id} must be a positive integer", item_id=item_id
            )
        lines.append(LineRequest(item_id=item_id, quantity=quantity))

    if not lines:
        raise ValidationFailure("Order must contain at least one item")
    return lines


def price_line(entry: CatalogEntry, quantity: int) -> BuiltLine:
    unit_price = to_money(entry.price)
    return BuiltLine(
        item_id=entry.item_id,
        quantity=quantity,
        unit_price=unit_price,
        subtotal=to_money(unit_price * quantity),
    )


def check_entry(entry: CatalogEntry, requested: int):
    if not entry.is_available:
        raise ItemUnavailable(entry.item_id)
    if requested > entry.available_quantity:
        raise InsufficientStock(entry.item_id, requested=requested, available=entry.available_quantity)


def lookup(catalog: CatalogReader, item_id: int) -> CatalogEntry:
    try:
        return catalog.get_item(item_id)
    except NotFound:
        raise ItemUnavailable(item_id)


def build_order(catalog: CatalogReader, user_id: int, items, special_instructions: Optional[str] = None) -> OrderBuild:
    """Validate the request against the catalog and compute line and order totals.

    Raises ValidationFailure, ItemUnavailable or InsufficientStock on the
    first problem found.
    """
    lines = normalize_lines(items)
    if special_instructions is not None and not isinstance(special_instructions, str):
        raise ValidationFailure("special_instructions must be text")

    # the same item may be requested on several lines
    requested = defaultdict(int)
    built = []
    for line in lines:
        entry = lookup(catalog, line.item_id)
        requested[line.item_id] += line.quantity
        check_entry(entry, requested[line.item_id])
        built.append(price_line(entry, line.quantity))

    total = to_money(sum((b.subtotal for b in built), Decimal("0")))
    return OrderBuild(
        user_id=user_id,
        lines=built,
        total_amount=total,
        special_instructions=special_instructions or None,
    )
