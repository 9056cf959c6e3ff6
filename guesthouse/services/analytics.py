from datetime import date, timedelta
from decimal import Decimal

from ..models import Expense, Guest, Room, RoomStatus, to_money


def occupancy_rate(rooms: list[Room]) -> float:
    if not rooms:
        return 0.0
    occupied = sum(1 for r in rooms if r.status == RoomStatus.OCCUPIED.value)
    return occupied / len(rooms) * 100


def current_guests(guests: list[Guest]) -> list[Guest]:
    return [g for g in guests if g.check_out is None]


def pending_guests(guests: list[Guest]) -> list[Guest]:
    return [g for g in guests if to_money(g.pending_amount) > 0]


def revenue_on(guests: list[Guest], day: date) -> Decimal:
    return sum((to_money(g.paid_amount) for g in guests if g.check_in == day), Decimal("0.00"))


def revenue_between(guests: list[Guest], start: date, end: date) -> Decimal:
    """Paid amounts for check-ins in the half-open window [start, end)."""
    return sum((to_money(g.paid_amount) for g in guests if start <= g.check_in < end), Decimal("0.00"))


def daily_revenue(guests: list[Guest], today: date, days: int = 7) -> list[dict]:
    """One bucket per calendar day, oldest first, ending with today."""
    buckets = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        buckets.append({"date": day, "label": day.strftime("%b %d"), "revenue": float(revenue_on(guests, day))})
    return buckets


def month_bounds(month: str) -> tuple[date, date]:
    """``YYYY-MM`` -> (first day, first day of the next month)."""
    start = date.fromisoformat(f"{month}-01")
    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end


def available_months(guests: list[Guest]) -> list[str]:
    return sorted({g.check_in.strftime("%Y-%m") for g in guests}, reverse=True)


def monthly_breakdown(guests: list[Guest], month: str) -> dict:
    start, end = month_bounds(month)
    days: dict[date, dict] = {}
    for g in guests:
        if not (start <= g.check_in < end):
            continue
        bucket = days.setdefault(g.check_in, {"date": g.check_in, "guests": [], "total_received": Decimal("0.00"), "total_pending": Decimal("0.00")})
        bucket["guests"].append(g)
        bucket["total_received"] += to_money(g.paid_amount)
        bucket["total_pending"] += g.pending_display

    ordered = [days[d] for d in sorted(days, reverse=True)]
    totals = {
        "received": sum((d["total_received"] for d in ordered), Decimal("0.00")),
        "pending": sum((d["total_pending"] for d in ordered), Decimal("0.00")),
        "guests": sum(len(d["guests"]) for d in ordered),
    }
    return {"month": month, "days": ordered, "totals": totals}


def dashboard_summary(rooms: list[Room], guests: list[Guest], expenses: list[Expense], today: date) -> dict:
    total_revenue = sum((to_money(g.paid_amount) for g in guests), Decimal("0.00"))
    pending_payments = sum((g.pending_display for g in guests), Decimal("0.00"))
    total_expenses = sum((to_money(e.amount) for e in expenses), Decimal("0.00"))
    # Rolling window: the last 30 calendar days, today included
    monthly_revenue = revenue_between(guests, today - timedelta(days=29), today + timedelta(days=1))

    return {
        "rooms": {
            "total": len(rooms),
            "available": sum(1 for r in rooms if r.status == RoomStatus.AVAILABLE.value),
            "occupied": sum(1 for r in rooms if r.status == RoomStatus.OCCUPIED.value),
            "maintenance": sum(1 for r in rooms if r.status == RoomStatus.MAINTENANCE.value),
            "occupancy_rate": occupancy_rate(rooms),
        },
        "guests": {
            "total": len(guests),
            "current": len(current_guests(guests)),
            "frequent": sum(1 for g in guests if g.is_frequent),
        },
        "finance": {
            "total_revenue": float(total_revenue),
            "pending_payments": float(pending_payments),
            "total_expenses": float(total_expenses),
            "net_income": float(total_revenue - total_expenses),
            "monthly_revenue": float(monthly_revenue),
        },
        "trends": {"daily_revenue": daily_revenue(guests, today)},
    }
