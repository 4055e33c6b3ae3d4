from __future__ import annotations

from collections import defaultdict
from typing import Dict, List

from expense_api.models.expense import Analysis, Expense, UnusualSpending

UNUSUAL_SPENDING_ADVICE = "Consider reducing spending in categories with above-average daily expenses"


class ExpenseAnalyzer:
    """
    Aggregate statistics over a set of expenses, shared by the query,
    insights and analysis routes.
    """

    def total_spent(self, expenses: List[Expense]) -> float:
        return sum(exp.amount for exp in expenses)

    def category_totals(self, expenses: List[Expense]) -> Dict[str, float]:
        # dict keeps first-seen category order
        totals: Dict[str, float] = defaultdict(float)
        for exp in expenses:
            totals[exp.category] += exp.amount
        return dict(totals)

    @staticmethod
    def distinct_days(expenses: List[Expense]) -> int:
        return len({exp.day for exp in expenses})

    def daily_average(self, expenses: List[Expense]) -> float:
        return self.total_spent(expenses) / max(1, self.distinct_days(expenses))

    def unusual_spending(self, expenses: List[Expense]) -> List[UnusualSpending]:
        """
        Categories whose per-day rate beats the overall daily average.
        A single large one-off expense is enough to be flagged.
        """
        days = self.distinct_days(expenses)
        if days == 0:
            return []

        overall = self.daily_average(expenses)
        unusual = []
        for category, total in self.category_totals(expenses).items():
            avg_per_day = total / days
            if avg_per_day > overall:
                unusual.append(UnusualSpending(category=category, total=total, avg_per_day=avg_per_day))
        return unusual

    def analyze(self, expenses: List[Expense]) -> Analysis:
        if not expenses:
            return Analysis()

        unusual = self.unusual_spending(expenses)
        return Analysis(
            total_spent=self.total_spent(expenses),
            category_summary=self.category_totals(expenses),
            daily_average=self.daily_average(expenses),
            unusual_spending=unusual,
            recommendations=[UNUSUAL_SPENDING_ADVICE] if unusual else [],
        )
