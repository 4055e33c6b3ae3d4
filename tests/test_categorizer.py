from conftest import FakeAIClient
from expense_api.utils.categorizer import CATEGORY_KEYWORDS, Categorizer, match_keywords


def test_keyword_match():
    assert Categorizer().categorize("I spent $20 on gas") == "transportation"
    assert Categorizer().categorize("Doctor visit $80") == "health"
    assert Categorizer().categorize("RENT for May $1200") == "housing"


def test_first_category_in_table_order_wins():
    # "food store" is a groceries keyword, but "food" belongs to the earlier food entry
    assert match_keywords("food store run") == "food"
    # "store" (shopping) and "game" (entertainment): entertainment comes first
    assert match_keywords("game store") == "entertainment"


def test_table_order_is_fixed():
    assert list(CATEGORY_KEYWORDS)[:3] == ["food", "groceries", "transportation"]


def test_keyword_match_skips_classifier():
    client = FakeAIClient()
    assert Categorizer(client).categorize("Uber home $12") == "transportation"
    assert client.classified == []


def test_no_classifier_falls_back_to_other():
    assert Categorizer().categorize("$30 gift for mom") == "other"


def test_positive_purchase_is_shopping():
    client = FakeAIClient(label="POSITIVE")
    assert Categorizer(client).categorize("Had to buy a lamp $30") == "shopping"
    assert client.classified == ["Had to buy a lamp $30"]


def test_positive_consumption_is_food():
    assert Categorizer(FakeAIClient(label="POSITIVE")).categorize("eat out $25") == "food"


def test_negative_sentiment_is_other():
    assert Categorizer(FakeAIClient(label="NEGATIVE")).categorize("Had to buy a lamp $30") == "other"


def test_positive_without_intent_words_is_other():
    assert Categorizer(FakeAIClient(label="POSITIVE")).categorize("$30 gift for mom") == "other"


def test_classifier_failure_is_other():
    assert Categorizer(FakeAIClient(fail=True)).categorize("Had to buy a lamp $30") == "other"
