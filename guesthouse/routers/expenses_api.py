import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db, with_retry
from ..models import Expense

router = APIRouter(prefix="/api/v1/expenses", tags=["expenses"])

class ExpenseOut(BaseModel):
    id: int
    description: str
    amount: float
    category: str
    date: dt.date
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True

class ExpenseCreateIn(BaseModel):
    description: str = Field(min_length=1, max_length=300)
    amount: float = Field(gt=0)
    category: str = "General"
    date: Optional[dt.date] = None

@router.get("", response_model=List[ExpenseOut])
def api_expenses(db: Session = Depends(get_db)):
    return with_retry(lambda: db.query(Expense).order_by(Expense.date.desc(), Expense.id.desc()).all(), db)

@router.post("", response_model=ExpenseOut, status_code=201)
def api_create_expense(payload: ExpenseCreateIn, db: Session = Depends(get_db)):
    description = payload.description.strip()
    if not description:
        raise HTTPException(status_code=400, detail="description is required")
    expense = Expense(
        description=description,
        amount=payload.amount,
        category=payload.category.strip() or "General",
        date=payload.date or dt.date.today(),
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)
    return expense

@router.delete("/{expense_id}", status_code=204)
def api_delete_expense(expense_id: int, db: Session = Depends(get_db)):
    expense = db.get(Expense, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    db.delete(expense)
    db.commit()
    return Response(status_code=204)
