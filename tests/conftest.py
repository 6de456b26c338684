import json
import os
import uuid
from pathlib import Path

# Console-only logging for the test run; must be set before utils.logs_config is imported
os.environ["LOG_DIR"] = ""

import mongomock
import pytest
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from pymongo.results import UpdateResult

from utils.database_connections import MongoDBConnection

BOOKS_FILE = Path(__file__).resolve().parents[1] / "inputs" / "books.json"

# Point at a disposable mongod (e.g. mongodb://localhost:27017/) to run the live-server tests
MONGODB_TEST_URI = os.getenv("MONGODB_TEST_URI")


class MulCollection:
    """
    Wraps a mongomock collection and applies `$mul` updates, which mongomock does not implement.

    Matching documents are read, multiplied and written back with `$set`, one by one. A field
    missing from a document is set to 0, as the server does. Everything else is delegated.
    """

    def __init__(self, collection):
        self._collection = collection

    def __getattr__(self, name):
        return getattr(self._collection, name)

    def update_many(self, filter, update, **kwargs):
        if "$mul" not in update:
            return self._collection.update_many(filter, update, **kwargs)

        others = {op: fields for op, fields in update.items() if op != "$mul"}
        modified = 0
        for doc in list(self._collection.find(filter)):
            changes = dict(others)
            changes["$set"] = dict(others.get("$set", {}))
            for field, factor in update["$mul"].items():
                changes["$set"][field] = doc.get(field, 0) * factor
            self._collection.update_one({"_id": doc["_id"]}, changes)
            modified += 1
        return UpdateResult({"n": modified, "nModified": modified, "ok": 1.0}, acknowledged=True)


@pytest.fixture(scope="session")
def sample_books():
    with open(BOOKS_FILE, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture()
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture()
def books_collection(mongo_client):
    return MulCollection(mongo_client["plp_bookstore"]["books"])


@pytest.fixture()
def seeded_collection(books_collection, sample_books):
    books_collection.insert_many([dict(book) for book in sample_books])
    return books_collection


@pytest.fixture()
def connection(mongo_client):
    conn = MongoDBConnection("plp_bookstore", "books", client=mongo_client)
    conn.collection = MulCollection(conn.collection)
    return conn


@pytest.fixture()
def live_collection():
    """
    A `books` collection in a throwaway database on a real server, dropped afterwards.

    Skipped unless MONGODB_TEST_URI points at a reachable server.
    """

    if not MONGODB_TEST_URI:
        pytest.skip("MONGODB_TEST_URI is not set")

    client = MongoClient(MONGODB_TEST_URI, serverSelectionTimeoutMS=2000)
    try:
        client.admin.command("ping")
    except PyMongoError as e:
        client.close()
        pytest.skip(f"MongoDB server not reachable: {e}")

    database_name = f"plp_bookstore_test_{uuid.uuid4().hex[:8]}"
    yield client[database_name]["books"]

    client.drop_database(database_name)
    client.close()


@pytest.fixture()
def live_seeded_collection(live_collection, sample_books):
    live_collection.insert_many([dict(book) for book in sample_books])
    return live_collection
