"""
One function per driver capability shown by the demo.

Every function takes the collection handle explicitly and, where it makes
sense inside a transaction, an optional session.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timezone
from pymongo import ASCENDING
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from bson import ObjectId

from docdb_demo.errors import translate_errors
from docdb_demo.models.person import Person

logger = logging.getLogger(__name__)

AGE_FIELD = "age"
BIRTH_DATE_FIELD = "dateOfBirth"
NAME_FIELD = "name"


def serialize_document(doc: Any) -> Any:
    """
    Recursively convert a MongoDB document to printable values.
    Handles ObjectId, datetime, and nested structures.
    """
    if doc is None:
        return None
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    if isinstance(doc, dict):
        return {key: serialize_document(value) for key, value in doc.items()}
    if isinstance(doc, list):
        return [serialize_document(item) for item in doc]
    if isinstance(doc, bytes):
        return doc.decode('utf-8', errors='replace')
    return doc


def reset_collection(collection: Collection) -> None:
    """Drop the collection so each run starts empty"""
    with translate_errors("drop"):
        collection.drop()
    logger.info(f"Dropped collection {collection.full_name}")


def build_seed(count: int, name: str, now: Optional[datetime] = None) -> List[Person]:
    """Records named `name` aged 0..count-1, all born `now`"""
    born = now or datetime.now(timezone.utc)
    return [Person(name=name, age=age, date_of_birth=born) for age in range(count)]


def insert_people(collection: Collection, people: List[Person], ordered: bool = False) -> int:
    """
    Bulk insert records

    Args:
        collection: Target collection
        people: Records to insert
        ordered: When False a failing record does not stop the others

    Returns:
        int: Number of records inserted
    """
    if not people:
        return 0
    with translate_errors("insert_many"):
        result = collection.insert_many([p.to_document() for p in people], ordered=ordered)
    logger.info(f"Inserted {len(result.inserted_ids)} documents (ordered={ordered})")
    return len(result.inserted_ids)


def read_page(collection: Collection, skip: int, limit: int, max_time_ms: int) -> List[Person]:
    """
    Read a bounded slice of records with a server-side time limit

    Raises:
        OperationTimeoutError: If the server exceeds max_time_ms
    """
    with translate_errors("find page"):
        cursor = collection.find().skip(skip).limit(limit).max_time_ms(max_time_ms)
        return [Person.from_document(doc) for doc in cursor]


def sum_ages_client_side(collection: Collection) -> int:
    """Scan every record and add up ages in the application. Does not scale."""
    total = 0
    with translate_errors("find all"):
        for doc in collection.find():
            total += doc[AGE_FIELD]
    return total


def sum_ages_server_side(collection: Collection) -> int:
    """Let the server add up ages with a $group/$sum pipeline"""
    pipeline = [{"$group": {"_id": None, "cumulativeAge": {"$sum": f"${AGE_FIELD}"}}}]
    with translate_errors("aggregate"):
        result = next(iter(collection.aggregate(pipeline)), None)
    if result is None:
        return 0
    return result["cumulativeAge"]


def ensure_age_index(collection: Collection) -> str:
    """Create an ascending index on age; a no-op when it exists"""
    with translate_errors("create_index"):
        name = collection.create_index([(AGE_FIELD, ASCENDING)])
    logger.info(f"Index {name} ready")
    return name


def update_birth_date(collection: Collection, age: int, date_of_birth: datetime) -> Tuple[int, int]:
    """
    Set the birth date of one record with the given age

    Returns:
        tuple: (matched_count, modified_count)
    """
    with translate_errors("update_one"):
        result = collection.update_one(
            {AGE_FIELD: age},
            {"$set": {BIRTH_DATE_FIELD: date_of_birth}}
        )
    return result.matched_count, result.modified_count


def find_projected(collection: Collection, age: int, excluded: str = AGE_FIELD) -> Optional[Dict[str, Any]]:
    """Fetch one record with the given age, leaving out one field"""
    with translate_errors("find_one"):
        return collection.find_one({AGE_FIELD: age}, projection={excluded: 0})


def delete_older_than(collection: Collection, threshold: int) -> int:
    """Remove every record strictly older than threshold"""
    with translate_errors("delete_many"):
        result = collection.delete_many({AGE_FIELD: {"$gt": threshold}})
    logger.info(f"Deleted {result.deleted_count} documents with {AGE_FIELD} > {threshold}")
    return result.deleted_count


def insert_person(collection: Collection, person: Person, session: Optional[ClientSession] = None) -> str:
    with translate_errors("insert_one"):
        result = collection.insert_one(person.to_document(), session=session)
    return str(result.inserted_id)


def delete_by_name(collection: Collection, name: str, session: Optional[ClientSession] = None) -> int:
    with translate_errors("delete_many"):
        result = collection.delete_many({NAME_FIELD: name}, session=session)
    return result.deleted_count


def count_people(
    collection: Collection,
    query: Optional[Dict[str, Any]] = None,
    session: Optional[ClientSession] = None
) -> int:
    """Count records matching query; with a session the count joins its transaction"""
    with translate_errors("count_documents"):
        return collection.count_documents(query or {}, session=session)
