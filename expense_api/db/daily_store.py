"""
Daily Store
Persists expenses as one record per UTC calendar day ("YYYY-MM-DD").

Two backends share the same contract:
- JsonFileDailyStore: one <day>.json document per day under DATA_DIR
- DynamoDailyStore: one item per day in a DynamoDB table keyed on "date"
"""
import json
import logging
import os
import tempfile
import threading
from collections import defaultdict
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from expense_api.models.expense import DailyRecord, Expense

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Reading or writing a daily record failed."""
    pass


class DailyStore:
    """Base class: subclasses implement _read, _write and list_days."""

    def __init__(self) -> None:
        # One lock per day ever appended to; entries live as long as the store
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _read(self, day: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def _write(self, day: str, expenses: List[Dict[str, Any]]) -> None:
        raise NotImplementedError

    def list_days(self) -> List[str]:
        raise NotImplementedError

    def describe(self) -> Dict[str, Any]:
        raise NotImplementedError

    def load(self, day: str) -> DailyRecord:
        """Return the record for a day, or an empty one when nothing was saved yet."""
        raw = self._read(day)
        try:
            expenses = [Expense(**item) for item in raw]
        except (TypeError, ValueError) as e:
            raise StorageError(f"Corrupt daily record {day}: {e}") from e
        return DailyRecord(date=day, expenses=expenses)

    def save(self, day: str, expenses: List[Expense]) -> None:
        """Overwrite the full expense list of a day."""
        self._write(day, [expense.model_dump(mode="json") for expense in expenses])

    def _lock_for(self, day: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[day]

    def append(self, day: str, expense: Expense) -> DailyRecord:
        """Add one expense to a day; concurrent appends to the same day are serialized."""
        with self._lock_for(day):
            record = self.load(day)
            record.expenses.append(expense)
            self.save(day, record.expenses)
        logger.info(f"Stored expense for {day} ({len(record.expenses)} on that day)")
        return record

    def load_range(self, start_day: str, end_day: str) -> List[Expense]:
        """
        Expenses of every day in [start_day, end_day], day-ascending then insertion order.
        Plain string comparison is valid because days are fixed-width ISO dates.
        """
        expenses: List[Expense] = []
        for day in self.list_days():
            if start_day <= day <= end_day:
                expenses.extend(self.load(day).expenses)
        return expenses


class JsonFileDailyStore(DailyStore):
    def __init__(self, data_dir: str | Path) -> None:
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, day: str) -> Path:
        return self.data_dir / f"{day}.json"

    def _read(self, day: str) -> List[Dict[str, Any]]:
        path = self._path(day)
        try:
            with path.open(encoding="utf-8") as fp:
                data = json.load(fp)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {path.name}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Corrupt daily record {path.name}: expected an object")
        return data.get("expenses", [])

    def _write(self, day: str, expenses: List[Dict[str, Any]]) -> None:
        path = self._path(day)
        # Write to a sibling temp file and swap it in, so a failed write leaves the old record intact
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{day}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump({"date": day, "expenses": expenses}, fp, indent=2)
            os.replace(tmp_name, path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise StorageError(f"Failed to write {path.name}: {e}") from e

    def list_days(self) -> List[str]:
        try:
            return sorted(p.stem for p in self.data_dir.glob("*.json"))
        except OSError as e:
            raise StorageError(f"Failed to list {self.data_dir}: {e}") from e

    def describe(self) -> Dict[str, Any]:
        return {
            "backend": "file",
            "data_dir": str(self.data_dir),
            "accessible": self.data_dir.is_dir() and os.access(self.data_dir, os.W_OK),
        }


class DynamoDailyStore(DailyStore):
    def __init__(self, table) -> None:
        super().__init__()
        self.table = table

    def _read(self, day: str) -> List[Dict[str, Any]]:
        try:
            response = self.table.get_item(Key={"date": day})
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"get_item failed for {day}: {e}") from e
        item = response.get("Item")
        return _from_dynamo(item.get("expenses", [])) if item else []

    def _write(self, day: str, expenses: List[Dict[str, Any]]) -> None:
        try:
            self.table.put_item(Item=_convert_for_dynamo({"date": day, "expenses": expenses}))
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"put_item failed for {day}: {e}") from e

    def list_days(self) -> List[str]:
        return sorted(self._scan_days())

    def load_range(self, start_day: str, end_day: str) -> List[Expense]:
        expenses: List[Expense] = []
        for day in sorted(self._scan_days(Attr("date").between(start_day, end_day))):
            expenses.extend(self.load(day).expenses)
        return expenses

    def _scan_days(self, filter_expression=None) -> List[str]:
        kwargs: Dict[str, Any] = {
            "ProjectionExpression": "#d",
            "ExpressionAttributeNames": {"#d": "date"},
        }
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        days: List[str] = []
        try:
            while True:
                response = self.table.scan(**kwargs)
                days.extend(item["date"] for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"scan failed: {e}") from e
        return days

    def describe(self) -> Dict[str, Any]:
        status: Dict[str, Any] = {"backend": "dynamo", "table": self.table.name, "accessible": False}
        try:
            self.table.scan(Limit=1)
            status["accessible"] = True
        except (ClientError, BotoCoreError) as e:
            status["error"] = str(e)
            logger.error(f"DynamoDB check failed: {str(e)}")
        return status


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj


def build_store(config) -> DailyStore:
    """Create the store selected by STORAGE_BACKEND."""
    backend = config.STORAGE_BACKEND.lower()
    if backend == "file":
        logger.info(f"Using JSON file store in {config.DATA_DIR}")
        return JsonFileDailyStore(config.DATA_DIR)
    if backend == "dynamo":
        logger.info(f"Using DynamoDB table {config.DYNAMO_EXPENSES_TABLE} ({config.DYNAMO_REGION})")
        dynamodb = boto3.resource("dynamodb", region_name=config.DYNAMO_REGION)
        return DynamoDailyStore(dynamodb.Table(config.DYNAMO_EXPENSES_TABLE))
    raise ValueError(f"Unknown STORAGE_BACKEND: {config.STORAGE_BACKEND}")
