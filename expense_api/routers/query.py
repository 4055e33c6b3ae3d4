import logging

from fastapi import APIRouter, Depends, HTTPException

from expense_api.core.services import Services, get_services
from expense_api.models.expense import QueryRequest, QueryResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=QueryResponse)
def answer_query(payload: QueryRequest, services: Services = Depends(get_services)):
    """Answer questions like "How much did I spend today?" or "Show my category breakdown"."""
    try:
        logger.info(f"Processing query: {payload.query}")
        answer = services.query_interpreter.answer(payload.query)
        logger.info(f"Generated answer: {answer}")
        return QueryResponse(answer=answer)
    except Exception as e:
        logger.error(f"Error processing query: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to process query: {str(e)}")
