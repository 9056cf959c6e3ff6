from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db, with_retry
from ..models import Expense, Guest, Room
from ..services import analytics
from .guests_api import GuestOut

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


@router.get("/summary")
def api_summary(db: Session = Depends(get_db)):
    rooms = with_retry(lambda: db.query(Room).all(), db)
    guests = with_retry(lambda: db.query(Guest).all(), db)
    expenses = with_retry(lambda: db.query(Expense).all(), db)
    summary = analytics.dashboard_summary(rooms, guests, expenses, date.today())
    summary["currency"] = settings.CURRENCY
    return summary


@router.get("/monthly")
def api_monthly(db: Session = Depends(get_db), month: Optional[str] = None):
    """Data tab: check-ins of one month grouped by day, newest day first."""
    month = month or date.today().strftime("%Y-%m")
    try:
        analytics.month_bounds(month)
    except ValueError:
        raise HTTPException(status_code=400, detail="month must look like YYYY-MM")
    guests = with_retry(lambda: db.query(Guest).order_by(Guest.check_in.desc(), Guest.id.desc()).all(), db)
    data = analytics.monthly_breakdown(guests, month)
    return {
        "month": data["month"],
        "available_months": analytics.available_months(guests),
        "days": [
            {
                "date": d["date"],
                "guests": [GuestOut.model_validate(g).model_dump() for g in d["guests"]],
                "total_received": float(d["total_received"]),
                "total_pending": float(d["total_pending"]),
            }
            for d in data["days"]
        ],
        "totals": {
            "received": float(data["totals"]["received"]),
            "pending": float(data["totals"]["pending"]),
            "guests": data["totals"]["guests"],
        },
    }
