import logging
from typing import Dict, List, Optional

from expense_api.services.ai_client import AIServiceError

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "other"

# Checked in this order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "food": ["restaurant", "dinner", "lunch", "breakfast", "meal", "food"],
    "groceries": ["grocery", "supermarket", "market", "food store"],
    "transportation": ["gas", "fuel", "uber", "lyft", "taxi", "bus", "train"],
    "utilities": ["electricity", "water", "internet", "phone", "bill"],
    "entertainment": ["movie", "concert", "show", "game", "streaming"],
    "shopping": ["clothes", "shoes", "amazon", "store"],
    "health": ["doctor", "medicine", "pharmacy", "medical"],
    "housing": ["rent", "mortgage", "maintenance", "repair"],
}

PURCHASE_WORDS = ("buy", "purchase")
CONSUMPTION_WORDS = ("eat", "drink")


def match_keywords(description: str) -> Optional[str]:
    lower_desc = description.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lower_desc for keyword in keywords):
            return category
    return None


class Categorizer:
    """
    Keyword rules first, then the sentiment model as a tie-breaker for
    descriptions no rule covers.
    """

    def __init__(self, classifier=None) -> None:
        self.classifier = classifier

    def categorize(self, description: str) -> str:
        category = match_keywords(description)
        if category:
            return category

        if self.classifier is None:
            return DEFAULT_CATEGORY

        try:
            sentiment = self.classifier.classify(description)
        except AIServiceError as e:
            logger.warning(f"Classifier unavailable, using '{DEFAULT_CATEGORY}': {str(e)}")
            return DEFAULT_CATEGORY

        lower_desc = description.lower()
        if "POSITIVE" in sentiment.upper():
            if any(word in lower_desc for word in PURCHASE_WORDS):
                return "shopping"
            if any(word in lower_desc for word in CONSUMPTION_WORDS):
                return "food"
        return DEFAULT_CATEGORY
