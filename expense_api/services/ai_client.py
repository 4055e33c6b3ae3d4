"""
Hosted Model Client
Talks to the Hugging Face Inference API for two black-box models:
- a sentiment classifier used as the categorization fallback
- a text2text generator that writes spending commentary
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import requests

from expense_api.models.expense import Expense, Insights

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """The hosted model could not be reached or answered with something unusable."""
    pass


class HuggingFaceClient:
    """
    Built once at startup and closed at shutdown; routes receive it through
    FastAPI dependencies instead of reaching for module globals.
    """

    def __init__(
        self,
        base_url: str,
        classifier_model: str,
        generator_model: str,
        api_token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.classifier_model = classifier_model
        self.generator_model = generator_model
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_token:
            self.session.headers["Authorization"] = f"Bearer {api_token}"

    def _post(self, model: str, payload: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/{model}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise AIServiceError(f"{model} request failed: {e}") from e
        except ValueError as e:
            raise AIServiceError(f"{model} returned invalid JSON: {e}") from e

    def classify(self, text: str) -> str:
        """Return the top label, e.g. 'POSITIVE' or 'NEGATIVE'."""
        data = self._post(self.classifier_model, {"inputs": text})
        # Single inputs come back either as [[{label, score}, ...]] or [{label, score}, ...]
        if isinstance(data, list) and data and isinstance(data[0], list):
            data = data[0]
        try:
            best = max(data, key=lambda item: item.get("score", 0))
            return str(best["label"])
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise AIServiceError(f"Unexpected classifier response: {data!r}") from e

    def generate(self, prompt: str, max_length: int = 100) -> str:
        data = self._post(self.generator_model, {"inputs": prompt, "parameters": {"max_length": max_length}})
        try:
            return str(data[0]["generated_text"])
        except (TypeError, IndexError, KeyError) as e:
            raise AIServiceError(f"Unexpected generator response: {data!r}") from e

    def describe(self) -> Dict[str, Any]:
        return {
            "enabled": True,
            "classifier_model": self.classifier_model,
            "generator_model": self.generator_model,
        }

    def close(self) -> None:
        self.session.close()


class InsightGenerator:
    """Builds analysis prompts from expenses and collects the generated commentary."""

    def __init__(self, client: Optional[HuggingFaceClient], max_length: int = 100) -> None:
        self.client = client
        self.max_length = max_length

    @staticmethod
    def build_prompts(expenses: List[Expense]) -> List[str]:
        expense_text = ", ".join(
            f"{_format_number(e.amount)} on {e.category} ({e.description})" for e in expenses
        )
        return [
            f"Analyze spending pattern: {expense_text}",
            f"Suggest savings from: {expense_text}",
            f"Find unusual expenses in: {expense_text}",
        ]

    def generate(self, expenses: List[Expense]) -> Optional[Insights]:
        """Returns None when no generator is configured or any call fails."""
        if self.client is None or not expenses:
            return None

        prompts = self.build_prompts(expenses)
        try:
            with ThreadPoolExecutor(max_workers=len(prompts)) as pool:
                pattern, savings, unusual = pool.map(
                    lambda prompt: self.client.generate(prompt, self.max_length), prompts
                )
        except AIServiceError as e:
            logger.warning(f"Insight generation unavailable: {str(e)}")
            return None

        return Insights(pattern=pattern, savings=savings, unusual=unusual)


def _format_number(value: float) -> str:
    # 20.0 -> "20", 15.5 -> "15.5"
    return str(int(value)) if value.is_integer() else str(value)


def build_ai_client(config) -> Optional[HuggingFaceClient]:
    if not config.AI_ENABLED:
        logger.info("Hosted models disabled; keyword categorization only, no insights")
        return None
    logger.info(f"Using hosted models {config.CLASSIFIER_MODEL} and {config.GENERATOR_MODEL}")
    return HuggingFaceClient(
        base_url=config.HF_API_URL,
        classifier_model=config.CLASSIFIER_MODEL,
        generator_model=config.GENERATOR_MODEL,
        api_token=config.HF_API_TOKEN or None,
        timeout=config.AI_TIMEOUT_SECONDS,
    )
