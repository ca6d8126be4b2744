import logging
from typing import Optional
from pymongo import MongoClient
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from docdb_demo.errors import (
    DemoError,
    TransactionAbortError,
    WriteConflictError,
    is_write_conflict,
    translate_errors,
)
from docdb_demo.models.options import TransactionOptions
from docdb_demo.models.person import Person
from docdb_demo.models.report import TransactionOutcome
from docdb_demo.services.operations import count_people, delete_by_name, insert_person

logger = logging.getLogger(__name__)


class TransactionScope:
    """
    A session with one open transaction, bound to a `with` block.

    Leaving the block normally commits; leaving it with an exception aborts.
    The session is ended on every exit path. Only operations that are given
    the yielded session take part in the transaction.
    """

    def __init__(self, client: MongoClient, options: Optional[TransactionOptions] = None):
        self.client = client
        self.options = options or TransactionOptions()
        self.session: Optional[ClientSession] = None

    def __enter__(self) -> ClientSession:
        with translate_errors("start_session"):
            session = self.client.start_session()

        try:
            session.start_transaction(
                read_concern=self.options.driver_read_concern(),
                write_concern=self.options.driver_write_concern(),
                max_commit_time_ms=self.options.max_commit_time_ms
            )
        except PyMongoError as e:
            session.end_session()
            raise TransactionAbortError(f"Could not start transaction: {e}") from e

        logger.info(
            f"Transaction started (read concern {self.options.read_concern.value},"
            f" max commit time {self.options.max_commit_time_ms}ms)"
        )
        self.session = session
        return session

    def __exit__(self, exc_type, exc, tb) -> bool:
        session = self.session
        try:
            if exc_type is None:
                self._commit(session)
            else:
                self._abort(session, exc)
                self._raise_for(exc)
        finally:
            session.end_session()
            self.session = None
        return False

    def _commit(self, session: ClientSession) -> None:
        attempt = 0
        while True:
            try:
                session.commit_transaction()
                logger.info("Transaction committed")
                return
            except PyMongoError as e:
                if e.has_error_label("UnknownTransactionCommitResult") and attempt < self.options.commit_retries:
                    attempt += 1
                    logger.warning(f"Unknown commit result, retrying commit ({attempt}/{self.options.commit_retries})")
                    continue
                logger.error(f"Transaction commit failed: {e}")
                if is_write_conflict(e):
                    raise WriteConflictError(f"Transaction commit conflicted: {e}") from e
                raise TransactionAbortError(f"Transaction commit failed: {e}") from e

    def _abort(self, session: ClientSession, exc: BaseException) -> None:
        logger.warning(f"Aborting transaction after {type(exc).__name__}: {exc}")
        if not session.in_transaction:
            return
        try:
            session.abort_transaction()
        except PyMongoError as e:
            # The server discards the transaction on its own once the session ends
            logger.warning(f"Abort failed: {e}")

    @staticmethod
    def _raise_for(exc: BaseException) -> None:
        """Re-raise database failures from the block as transaction errors"""
        if isinstance(exc, (WriteConflictError, TransactionAbortError)):
            return
        if isinstance(exc, PyMongoError):
            if is_write_conflict(exc):
                raise WriteConflictError(f"Transaction conflicted: {exc}") from exc
            raise TransactionAbortError(f"Transaction aborted: {exc}") from exc
        if isinstance(exc, DemoError):
            raise TransactionAbortError(f"Transaction aborted: {exc.message}", exc.details) from exc


def replace_in_transaction(
    client: MongoClient,
    collection: Collection,
    newcomer: Person,
    name_to_remove: str,
    options: Optional[TransactionOptions] = None
) -> TransactionOutcome:
    """
    Insert one record and delete every record named name_to_remove atomically

    Args:
        client: Client that owns the session
        collection: Collection to modify
        newcomer: Record to insert
        name_to_remove: Name of the records to delete
        options: Transaction settings, snapshot/majority by default

    Returns:
        TransactionOutcome: Count seen without the session (pre-transaction
        state) and count seen through the session
    """
    with TransactionScope(client, options) as session:
        insert_person(collection, newcomer, session=session)
        removed = delete_by_name(collection, name_to_remove, session=session)
        logger.info(f"Removed {removed} '{name_to_remove}' records inside the transaction")

        # No session passed: this read is not part of the transaction
        outside = count_people(collection)
        inside = count_people(collection, session=session)

    return TransactionOutcome(outside_count=outside, inside_count=inside)
