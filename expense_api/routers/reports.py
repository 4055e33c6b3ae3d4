"""
Reports Router
Statistical analysis and generated commentary over the trailing window
"""
import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException

from expense_api.core.services import Services, get_services
from expense_api.models.expense import Analysis, InsightsResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def _window(services: Services):
    end = datetime.now(timezone.utc)
    start = end - timedelta(days=services.window_days)
    return services.store.load_range(start.date().isoformat(), end.date().isoformat())


@router.get("/insights", response_model=InsightsResponse)
def get_insights(services: Services = Depends(get_services)):
    try:
        expenses = _window(services)
        if not expenses:
            return InsightsResponse(message="No expenses found for analysis", insights=None)

        insights = services.insight_generator.generate(expenses)
        if insights is None:
            return InsightsResponse(message="AI analysis not available", insights=None)

        return InsightsResponse(message="AI analysis completed", insights=insights)
    except Exception as e:
        logger.error(f"Error generating AI insights: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/analysis", response_model=Analysis)
def get_analysis(services: Services = Depends(get_services)):
    try:
        expenses = _window(services)
        analysis = services.analyzer.analyze(expenses)
        logger.info(f"Analysis over {len(expenses)} expenses: total={analysis.total_spent:.2f}")
        return analysis
    except Exception as e:
        logger.error(f"Error generating analysis: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
