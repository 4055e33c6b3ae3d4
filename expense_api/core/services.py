"""
Service container
Everything the routes need is built once in the app lifespan, kept on
app.state and handed to route functions through Depends(get_services).
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from expense_api.db.daily_store import DailyStore, build_store
from expense_api.services.ai_client import HuggingFaceClient, InsightGenerator, build_ai_client
from expense_api.utils.analyzer import ExpenseAnalyzer
from expense_api.utils.categorizer import Categorizer
from expense_api.utils.query import QueryInterpreter

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: DailyStore
    categorizer: Categorizer
    analyzer: ExpenseAnalyzer
    insight_generator: InsightGenerator
    query_interpreter: QueryInterpreter
    ai_client: Optional[HuggingFaceClient] = None
    window_days: int = 30

    @classmethod
    def create(
        cls,
        store: DailyStore,
        ai_client: Optional[HuggingFaceClient] = None,
        window_days: int = 30,
        max_length: int = 100,
    ) -> "Services":
        analyzer = ExpenseAnalyzer()
        insight_generator = InsightGenerator(ai_client, max_length=max_length)
        return cls(
            store=store,
            categorizer=Categorizer(ai_client),
            analyzer=analyzer,
            insight_generator=insight_generator,
            query_interpreter=QueryInterpreter(store, analyzer, insight_generator, window_days),
            ai_client=ai_client,
            window_days=window_days,
        )

    def close(self) -> None:
        if self.ai_client is not None:
            self.ai_client.close()
            logger.info("Hosted model client closed")


def build_services(config) -> Services:
    return Services.create(
        store=build_store(config),
        ai_client=build_ai_client(config),
        window_days=config.DEFAULT_WINDOW_DAYS,
        max_length=config.GENERATION_MAX_LENGTH,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
