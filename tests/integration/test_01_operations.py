"""
Integration tests for the demonstrated operations.

Each test works on its own collection.
"""
import pytest
import logging
from datetime import datetime, timedelta, timezone

from docdb_demo.services import operations
from docdb_demo.services.demo import run_demo

logger = logging.getLogger(__name__)

pytestmark = pytest.mark.integration

SEED = 1000


@pytest.fixture
def seeded(collection):
    """Collection holding the standard seed."""
    operations.insert_people(collection, operations.build_seed(SEED, "Dupont"))
    return collection


class TestOperations:
    """Observable properties of each operation."""

    def test_01_count_after_insert(self, collection):
        """Test: After inserting N records a count returns N."""
        inserted = operations.insert_people(collection, operations.build_seed(SEED, "Dupont"))

        assert inserted == SEED
        assert operations.count_people(collection) == SEED

    def test_02_read_page(self, seeded):
        """Test: A page holds at most `limit` records."""
        page = operations.read_page(seeded, skip=0, limit=20, max_time_ms=10000)

        assert len(page) == 20
        assert all(p.name == "Dupont" for p in page)

    def test_03_sums_agree(self, seeded):
        """Test: Client-side and server-side sums are equal."""
        client_side = operations.sum_ages_client_side(seeded)
        server_side = operations.sum_ages_server_side(seeded)

        assert client_side == server_side == sum(range(SEED))

    def test_04_index_idempotent(self, seeded):
        """Test: Creating the age index twice is harmless."""
        first = operations.ensure_age_index(seeded)
        second = operations.ensure_age_index(seeded)

        assert first == second == "age_1"
        assert "age_1" in seeded.index_information()

    def test_05_point_update(self, seeded):
        """Test: The update touches only dateOfBirth of one record."""
        before = seeded.find_one({"age": 5})
        neighbour = seeded.find_one({"age": 6})
        born = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(days=5 * 365)

        matched, modified = operations.update_birth_date(seeded, 5, born)

        after = seeded.find_one({"age": 5})
        assert (matched, modified) == (1, 1)
        assert after["_id"] == before["_id"]
        assert after["name"] == before["name"]
        assert after["dateOfBirth"] == born
        assert seeded.find_one({"age": 6}) == neighbour

    def test_06_projection(self, seeded):
        """Test: The projected read leaves out age."""
        doc = operations.find_projected(seeded, 5)

        assert doc is not None
        assert "age" not in doc
        assert doc["name"] == "Dupont"

    def test_07_delete_threshold(self, seeded):
        """Test: After deleting by threshold nothing matches it."""
        deleted = operations.delete_older_than(seeded, 5)

        assert deleted == SEED - 6
        assert operations.count_people(seeded, {"age": {"$gt": 5}}) == 0
        assert operations.count_people(seeded) == 6


class TestDemo:
    """The whole routine."""

    def test_01_run_demo(self, client, settings):
        """Test: The routine reports the expected values end to end."""
        lines = []

        report = run_demo(client, settings, echo=lines.append)

        assert report.inserted_count == settings.seed_count
        assert len(report.page) == settings.page_size
        assert report.client_side_total_age == report.server_side_total_age
        assert report.deleted_count == settings.seed_count - 6
        assert report.remaining_count == 6
        assert report.transaction.outside_count == 6
        assert report.transaction.inside_count == 1
        assert lines[-1] == "Remaining after transaction: 1"
        logger.info(f"Demo steps: {[(s.step, round(s.execution_time_ms)) for s in report.steps]}")
