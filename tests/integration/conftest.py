"""
Pytest configuration for integration tests
"""
import pytest
import docker
import time
import logging
import uuid
from pymongo import MongoClient

from docdb_demo.config import Settings
from docdb_demo.models.options import ClientOptionsBuilder
from docdb_demo.services.connection import close_client, create_client, get_collection

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TEST_REPLICA_SET = "test-rs"
TEST_CONTAINER_NAME = "docdb-demo-test-rs"
TEST_PORT = 27100
MONGODB_IMAGE = "mongo:7.0"
TEST_URI = f"mongodb://localhost:{TEST_PORT}/?directConnection=true"


def wait_for_condition(condition_fn, timeout=60, interval=2, description="condition"):
    """Wait for a condition to be true."""
    start = time.time()
    while time.time() - start < timeout:
        try:
            if condition_fn():
                return True
        except Exception as e:
            logger.debug(f"Waiting for {description}: {e}")
        time.sleep(interval)
    raise TimeoutError(f"Timeout waiting for {description} after {timeout}s")


def cleanup_test_containers(docker_client: docker.DockerClient):
    """Remove the test container if a previous run left it behind."""
    containers = docker_client.containers.list(all=True, filters={"name": TEST_CONTAINER_NAME})
    for container in containers:
        logger.info(f"Removing container: {container.name}")
        container.remove(force=True)


@pytest.fixture(scope="session")
def docker_client():
    """Get Docker client, skipping the suite when Docker is not available."""
    try:
        client = docker.from_env()
        client.ping()
    except docker.errors.DockerException as e:
        pytest.skip(f"Docker is not available: {e}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def replica_set_uri(docker_client):
    """Start a single-node replica set and yield its connection string."""
    cleanup_test_containers(docker_client)

    logger.info(f"Starting {MONGODB_IMAGE} on port {TEST_PORT}")
    docker_client.containers.run(
        image=MONGODB_IMAGE,
        name=TEST_CONTAINER_NAME,
        command=f"mongod --replSet {TEST_REPLICA_SET} --bind_ip_all --port 27017",
        ports={'27017/tcp': TEST_PORT},
        detach=True,
        remove=False
    )

    admin = MongoClient(TEST_URI, serverSelectionTimeoutMS=2000)
    try:
        wait_for_condition(
            lambda: admin.admin.command("ping").get("ok") == 1,
            description="mongod to accept connections"
        )
        admin.admin.command("replSetInitiate", {
            "_id": TEST_REPLICA_SET,
            "members": [{"_id": 0, "host": "localhost:27017"}]
        })
        wait_for_condition(
            lambda: admin.admin.command("hello").get("isWritablePrimary"),
            description="replica set primary"
        )
    finally:
        admin.close()

    yield TEST_URI

    logger.info("Test session complete. Cleaning up...")
    cleanup_test_containers(docker_client)


@pytest.fixture(scope="session")
def settings(replica_set_uri):
    """Demo settings pointing at the test replica set."""
    return Settings(
        mongodb_uri=replica_set_uri,
        database_name="docdb_demo_it",
        server_selection_timeout_ms=5000,
        compressors=["zlib"],
    )


@pytest.fixture(scope="session")
def client(settings):
    """Connected client shared by the whole session."""
    mongo = create_client(ClientOptionsBuilder.from_settings(settings).build())
    yield mongo
    close_client(mongo)


@pytest.fixture
def collection(client, settings):
    """A fresh collection per test, dropped afterwards."""
    coll = get_collection(client, settings.database_name, f"people_{uuid.uuid4().hex[:8]}")
    yield coll
    coll.drop()
