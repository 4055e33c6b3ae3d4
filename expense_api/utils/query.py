"""
Query Interpreter
Turns a natural-language question into a textual answer built from
aggregate statistics and, when available, generated commentary.

The answer is assembled from an ordered list of rules. Each rule has a
trigger (substrings looked up in the lower-cased query) and a fragment
builder; every rule that fires contributes its fragment, in list order.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from expense_api.models.expense import Analysis, Expense, Insights

logger = logging.getLogger(__name__)

NO_EXPENSES_ANSWER = "No expenses found for the specified time period."
DEFAULT_WINDOW_DAYS = 30


def format_amount(value: float) -> str:
    return f"${value:.2f}"


def format_breakdown(summary: Dict[str, float]) -> str:
    return ", ".join(f"{category}: {format_amount(amount)}" for category, amount in summary.items())


def resolve_range(query: str, now: datetime, window_days: int = DEFAULT_WINDOW_DAYS) -> Tuple[datetime, datetime]:
    """Pick the period a question is about: today, this week (from Sunday), this month, or the trailing window."""
    lower_query = query.lower()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if "today" in lower_query:
        start = midnight
    elif "this week" in lower_query:
        # weekday(): Monday is 0, so Sunday is (weekday + 1) % 7 days back
        start = midnight - timedelta(days=(now.weekday() + 1) % 7)
    elif "this month" in lower_query:
        start = midnight.replace(day=1)
    else:
        start = now - timedelta(days=window_days)
    return start, now


@dataclass
class QueryContext:
    query: str
    expenses: List[Expense]
    analysis: Analysis
    fetch_insights: Callable[[], Optional[Insights]]
    _insights: Optional[Insights] = None
    _insights_fetched: bool = False

    @property
    def insights(self) -> Optional[Insights]:
        # Generation is slow; only ask once and only if a rule needs it
        if not self._insights_fetched:
            self._insights = self.fetch_insights()
            self._insights_fetched = True
        return self._insights


@dataclass(frozen=True)
class AnswerRule:
    triggers: Tuple[str, ...]
    build: Callable[[QueryContext], str]
    needs_insights: bool = False

    def fires(self, lower_query: str) -> bool:
        return any(trigger in lower_query for trigger in self.triggers)


def _today_fragment(ctx: QueryContext) -> str:
    text = f"Today's total spending: {format_amount(ctx.analysis.total_spent)}. "
    if ctx.analysis.category_summary:
        text += "Breakdown by category: " + format_breakdown(ctx.analysis.category_summary) + ". "
    return text


def _week_fragment(ctx: QueryContext) -> str:
    return (
        f"This week's total spending: {format_amount(ctx.analysis.total_spent)}. "
        f"Daily average: {format_amount(ctx.analysis.daily_average)}. "
    )


def _total_fragment(ctx: QueryContext) -> str:
    return (
        f"Total spending: {format_amount(ctx.analysis.total_spent)}. "
        f"Daily average: {format_amount(ctx.analysis.daily_average)}. "
    )


def _insight_fragment(label: str, field: str) -> Callable[[QueryContext], str]:
    def build(ctx: QueryContext) -> str:
        return f"\n{label}: {getattr(ctx.insights, field)}"
    return build


def _breakdown_fragment(ctx: QueryContext) -> str:
    return "\nCategory breakdown: " + format_breakdown(ctx.analysis.category_summary)


ANSWER_RULES: List[AnswerRule] = [
    AnswerRule(("today",), _today_fragment),
    AnswerRule(("this week",), _week_fragment),
    AnswerRule(("total", "spent"), _total_fragment),
    AnswerRule(("pattern", "trend"), _insight_fragment("Spending Pattern", "pattern"), needs_insights=True),
    AnswerRule(("save", "savings"), _insight_fragment("Savings Suggestions", "savings"), needs_insights=True),
    AnswerRule(("unusual", "strange"), _insight_fragment("Unusual Expenses", "unusual"), needs_insights=True),
    AnswerRule(("category", "breakdown"), _breakdown_fragment),
]


def _summary_fragments(ctx: QueryContext) -> List[str]:
    fragments = [_total_fragment(ctx).rstrip()]
    if ctx.insights is not None:
        fragments.append(f"\nSpending Pattern: {ctx.insights.pattern}")
        fragments.append(f"\nSavings Suggestions: {ctx.insights.savings}")
    return fragments


def build_answer(ctx: QueryContext, rules: List[AnswerRule] = ANSWER_RULES) -> str:
    lower_query = ctx.query.lower()
    fragments = []
    for rule in rules:
        if not rule.fires(lower_query):
            continue
        if rule.needs_insights and ctx.insights is None:
            continue
        fragment = rule.build(ctx)
        if fragment:
            fragments.append(fragment)

    if not fragments:
        fragments = _summary_fragments(ctx)

    return "".join(fragments).strip()


class QueryInterpreter:
    def __init__(self, store, analyzer, insight_generator, window_days: int = DEFAULT_WINDOW_DAYS) -> None:
        self.store = store
        self.analyzer = analyzer
        self.insight_generator = insight_generator
        self.window_days = window_days

    def answer(self, query: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        start, end = resolve_range(query, now, self.window_days)
        expenses = self.store.load_range(start.date().isoformat(), end.date().isoformat())
        logger.info(f"Query '{query}' covers {start.date()}..{end.date()}: {len(expenses)} expenses")

        if not expenses:
            return NO_EXPENSES_ANSWER

        ctx = QueryContext(
            query=query,
            expenses=expenses,
            analysis=self.analyzer.analyze(expenses),
            fetch_insights=lambda: self.insight_generator.generate(expenses),
        )
        return build_answer(ctx)
