import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from errors import AggregationSkip
from schemas import (
    DashboardStats,
    MonthlySales,
    OrderItem,
    OrderRecord,
    OrderStatus,
    ProductSales,
    StatusCount,
)

logger = logging.getLogger(__name__)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
# always charted, even at zero, so the axis stays put
BASELINE_MONTHS = ("Jan", "Feb", "Mar")
ALL_MONTHS = "All"
NO_BEST_SELLER = "N/A"
EXPORT_COLUMNS = ["OrderID", "Products", "Amount", "Status", "Month", "Address", "Contact", "Date"]

_snapshot_adapter = TypeAdapter(List[OrderItem])


def month_of(order: OrderRecord) -> str:
    return MONTHS[order.created_at.month - 1]


def normalize_month(month: Optional[str]) -> Optional[str]:
    """Return the canonical abbreviation, or None for "no filter"."""
    if month is None:
        return None
    month = month.strip()
    if not month or month.lower() == ALL_MONTHS.lower():
        return None
    return month[:3].title()


def filter_by_month(orders: Iterable[OrderRecord], month: Optional[str] = None) -> List[OrderRecord]:
    wanted = normalize_month(month)
    if wanted is None:
        return list(orders)
    return [o for o in orders if month_of(o) == wanted]


def is_delivered(status: Optional[str]) -> bool:
    return (status or "").strip().lower() == OrderStatus.delivered.value


def parse_snapshot(items: Any) -> List[OrderItem]:
    """Read an order's item snapshot, JSON text or a stored list of lines.

    Extra keys on a line are ignored; anything else unreadable raises AggregationSkip.
    """
    try:
        if isinstance(items, (str, bytes)):
            return _snapshot_adapter.validate_json(items)
        if isinstance(items, list):
            return _snapshot_adapter.validate_python(items)
    except ValidationError as exc:
        raise AggregationSkip(str(exc)) from exc
    raise AggregationSkip(f"unsupported snapshot type {type(items).__name__}")


def compute_dashboard(orders: Sequence[OrderRecord], month: Optional[str] = None) -> DashboardStats:
    selected = filter_by_month(orders, month)

    revenue = 0.0
    delivered = 0
    pending = 0
    monthly: Dict[str, float] = {m: 0.0 for m in BASELINE_MONTHS}
    tallies: Dict[str, int] = {}

    for order in selected:
        revenue += order.total
        if is_delivered(order.status):
            delivered += 1
        else:
            pending += 1

        key = month_of(order)
        monthly[key] = monthly.get(key, 0.0) + order.total

        try:
            lines = parse_snapshot(order.items)
        except AggregationSkip:
            logger.debug("Skipping unreadable item snapshot on order %s", order.id)
            continue
        for line in lines:
            tallies[line.name] = tallies.get(line.name, 0) + line.quantity

    # max() keeps the first key on ties
    best_seller = max(tallies, key=tallies.get) if tallies else NO_BEST_SELLER

    return DashboardStats(
        total_orders=len(selected),
        total_revenue=round(revenue, 2),
        delivered=delivered,
        pending=pending,
        best_seller=best_seller,
        sales_by_month=[
            MonthlySales(month=m, sales=round(monthly[m], 2))
            for m in sorted(monthly, key=MONTHS.index)
        ],
        status_breakdown=[
            StatusCount(name="Delivered", value=delivered),
            StatusCount(name="Pending", value=pending),
        ],
        product_sales=[
            ProductSales(name=name, quantity=qty)
            for name, qty in sorted(tallies.items(), key=lambda kv: -kv[1])
        ],
    )


def export_rows(orders: Iterable[OrderRecord]) -> List[Dict[str, object]]:
    """Flatten orders into spreadsheet rows."""
    rows = []
    for order in orders:
        try:
            products = ", ".join(f"{i.name} (x{i.quantity})" for i in parse_snapshot(order.items))
        except AggregationSkip:
            products = ""
        rows.append({
            "OrderID": order.id,
            "Products": products,
            "Amount": order.total,
            "Status": order.status,
            "Month": month_of(order),
            "Address": order.address,
            "Contact": order.contact,
            "Date": order.created_at.isoformat(sep=" ", timespec="seconds"),
        })
    return rows
