import logging
from datetime import datetime, timedelta, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from expense_api.core.services import Services, get_services
from expense_api.models.expense import Expense, ExpenseCreate
from expense_api.utils.parser import parse_expense

router = APIRouter()
logger = logging.getLogger(__name__)

PARSE_HINT = "Could not parse expense from text. Please include an amount (e.g., $20)."


@router.post("", response_model=Expense)
def create_expense(payload: ExpenseCreate, services: Services = Depends(get_services)):
    """
    Parse free text such as "Lunch $15.50 today" into an expense and file it
    under its calendar day.
    """
    try:
        expense = parse_expense(payload.text, services.categorizer)
        if expense is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PARSE_HINT)

        services.store.append(expense.day, expense)
        logger.info(f"Saved {expense.category} expense of {expense.amount:.2f} on {expense.day}")
        return expense
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error saving expense: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("", response_model=List[Expense])
def list_expenses(services: Services = Depends(get_services)):
    """Expenses of the trailing window (30 days by default), oldest day first."""
    try:
        end = datetime.now(timezone.utc)
        start = end - timedelta(days=services.window_days)
        return services.store.load_range(start.date().isoformat(), end.date().isoformat())
    except Exception as e:
        logger.error(f"Error fetching expenses: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
