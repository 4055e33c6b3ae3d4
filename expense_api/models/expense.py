from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExpenseCreate(BaseModel):
    text: str


class Expense(BaseModel):
    amount: float = Field(ge=0)
    category: str
    description: str = ""
    date: datetime

    @field_validator("date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def day(self) -> str:
        """UTC calendar day the expense is filed under, e.g. '2025-11-01'."""
        return self.date.date().isoformat()


class DailyRecord(BaseModel):
    date: str
    expenses: List[Expense] = Field(default_factory=list)


class UnusualSpending(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: str
    total: float
    avg_per_day: float = Field(alias="avgPerDay")


class Analysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_spent: float = Field(default=0.0, alias="totalSpent")
    category_summary: Dict[str, float] = Field(default_factory=dict, alias="categorySummary")
    daily_average: float = Field(default=0.0, alias="dailyAverage")
    unusual_spending: List[UnusualSpending] = Field(default_factory=list, alias="unusualSpending")
    recommendations: List[str] = Field(default_factory=list)


class Insights(BaseModel):
    pattern: str
    savings: str
    unusual: str


class InsightsResponse(BaseModel):
    message: str
    insights: Optional[Insights] = None


class QueryRequest(BaseModel):
    query: str


class QueryResponse(BaseModel):
    answer: str
