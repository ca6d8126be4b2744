import logging
import time
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, List

from pymongo import MongoClient

from docdb_demo.config import Settings
from docdb_demo.models.options import TransactionOptions
from docdb_demo.models.person import Person
from docdb_demo.models.report import DemoReport, StepMetrics
from docdb_demo.services import operations
from docdb_demo.services.connection import get_collection
from docdb_demo.services.transactions import replace_in_transaction

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


class _StepCounter:
    """Mutable holder for the documents a step touched"""

    def __init__(self):
        self.documents = 0


@contextmanager
def _timed(step: str, metrics: List[StepMetrics]) -> Iterator[_StepCounter]:
    start_time = time.time()
    counter = _StepCounter()
    yield counter
    execution_time_ms = (time.time() - start_time) * 1000
    metrics.append(StepMetrics(
        step=step,
        execution_time_ms=execution_time_ms,
        documents_affected=counter.documents,
        timestamp=datetime.now(timezone.utc)
    ))
    logger.info(f"Step '{step}' completed in {execution_time_ms:.2f}ms, {counter.documents} documents")


def run_demo(client: MongoClient, settings: Settings, echo: Callable[[str], None] = print) -> DemoReport:
    """
    Run every driver capability in order and print what each one returns

    Args:
        client: Connected client, passed to every step
        settings: Demo parameters
        echo: Sink for the human-readable output lines

    Returns:
        DemoReport: Every value the steps observed

    Raises:
        DemoError: The first failure; later steps do not run, and the failing
            step records no StepMetrics since no report is returned
    """
    collection = get_collection(client, settings.database_name, settings.collection_name)
    report = DemoReport()
    steps = report.steps
    now = datetime.now(timezone.utc)

    with _timed("reset", steps):
        operations.reset_collection(collection)

    with _timed("insert_many", steps) as step:
        seed = operations.build_seed(settings.seed_count, settings.seed_name, now)
        report.inserted_count = operations.insert_people(collection, seed, ordered=False)
        step.documents = report.inserted_count

    with _timed("read_page", steps) as step:
        report.page = operations.read_page(
            collection,
            skip=settings.page_skip,
            limit=settings.page_size,
            max_time_ms=settings.page_max_time_ms
        )
        step.documents = len(report.page)
    for person in report.page:
        echo(str(person))

    # Full scan without pagination: shown for comparison only
    with _timed("full_scan", steps):
        report.client_side_total_age = operations.sum_ages_client_side(collection)
    echo(f"Total age: {report.client_side_total_age}")

    with _timed("aggregate", steps):
        report.server_side_total_age = operations.sum_ages_server_side(collection)
    echo(f"Total age: {report.server_side_total_age}")

    with _timed("create_index", steps):
        report.index_name = operations.ensure_age_index(collection)

    with _timed("update_one", steps) as step:
        born = now - timedelta(days=settings.update_years_back * DAYS_PER_YEAR)
        report.matched_count, report.modified_count = operations.update_birth_date(
            collection, settings.update_target_age, born
        )
        step.documents = report.modified_count

    with _timed("find_projected", steps) as step:
        report.projected = operations.find_projected(collection, settings.update_target_age)
        step.documents = 1 if report.projected else 0
    echo(str(operations.serialize_document(report.projected)))

    with _timed("delete_many", steps) as step:
        report.deleted_count = operations.delete_older_than(collection, settings.delete_age_threshold)
        step.documents = report.deleted_count
    echo(f"Deleted {report.deleted_count}")

    with _timed("count", steps) as step:
        report.remaining_count = operations.count_people(collection)
        step.documents = report.remaining_count
    echo(f"Remaining {report.remaining_count}")

    with _timed("transaction", steps) as step:
        newcomer = Person(
            name=settings.transaction_newcomer_name,
            age=settings.transaction_newcomer_age,
            date_of_birth=now - timedelta(days=settings.transaction_newcomer_age * DAYS_PER_YEAR)
        )
        report.transaction = replace_in_transaction(
            client,
            collection,
            newcomer,
            settings.seed_name,
            TransactionOptions.from_settings(settings)
        )
        step.documents = report.transaction.inside_count
    echo(f"Out of transaction, there are {report.transaction.outside_count} records")
    echo(f"Remaining after transaction: {report.transaction.inside_count}")

    return report
