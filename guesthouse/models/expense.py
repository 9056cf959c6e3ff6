from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import Integer, String, Date, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from ..db import Base

class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    description: Mapped[str] = mapped_column(String(300), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
