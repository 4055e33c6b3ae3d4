from datetime import datetime, timezone

import pytest

from expense_api.db.daily_store import JsonFileDailyStore
from expense_api.models.expense import Expense
from expense_api.services.ai_client import AIServiceError

# Wednesday
NOW = datetime(2024, 5, 15, 14, 30, tzinfo=timezone.utc)


class FakeAIClient:
    """Stands in for HuggingFaceClient: fixed label, canned generations, call log."""

    def __init__(self, label="POSITIVE", fail=False):
        self.label = label
        self.fail = fail
        self.classified = []
        self.prompts = []
        self.closed = False

    def classify(self, text):
        self.classified.append(text)
        if self.fail:
            raise AIServiceError("model offline")
        return self.label

    def generate(self, prompt, max_length=100):
        self.prompts.append(prompt)
        if self.fail:
            raise AIServiceError("model offline")
        if prompt.startswith("Analyze spending pattern"):
            return "Mostly transport and food."
        if prompt.startswith("Suggest savings"):
            return "Take the bus more often."
        return "Nothing unusual."

    def describe(self):
        return {"enabled": True, "classifier_model": "fake-classifier", "generator_model": "fake-generator"}

    def close(self):
        self.closed = True


def make_expense(amount, category, description, date):
    return Expense(amount=amount, category=category, description=description, date=date)


@pytest.fixture
def store(tmp_path):
    return JsonFileDailyStore(tmp_path / "data")


@pytest.fixture
def fake_ai():
    return FakeAIClient()
