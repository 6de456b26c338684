##################################################################################################
#                                         SCRIPT OVERVIEW                                        #
#                                                                                                #
# This script seeds the bookstore collection with the sample books listed in a JSON file.        #
# Running it before `bookstore_queries` gives the query script a known starting point, since     #
# the queries update and delete books.                                                           #
#                                                                                                #
# Key Features:                                                                                  #
# - Reads the books from a JSON array file.                                                      #
# - Optionally drops the existing collection first (fresh reseed).                               #
# - Inserts documents in batches with a progress bar.                                            #
#                                                                                                #
# Configuration Variables:                                                                       #
# - `INPUT_FILE`: Path to the JSON file with the books.                                          #
# - `DROP_EXISTING`: Whether to drop the collection before inserting.                            #
# - `BATCH_SIZE`: Number of documents per `insert_many` call.                                    #
##################################################################################################

##################################################################################################
#                                            IMPORTS                                             #
##################################################################################################

import json

from utils.database_connections import MongoDBConnection            # Database connection
from utils.logs_config import logger                                # Logs and events
from tqdm import tqdm                                               # Progress bar

##################################################################################################
#                                        CONFIGURATION                                           #
##################################################################################################

DATABASE_NAME = "plp_bookstore"     # Target database
COLLECTION_NAME = "books"           # Target collection

INPUT_FILE = "inputs/books.json"    # Books to insert
DROP_EXISTING = True                # Drop the collection before seeding
BATCH_SIZE = 500                    # Number of documents per batch

##################################################################################################
#                                        IMPLEMENTATION                                          #
##################################################################################################

def load_books(input_file):
    """
    Loads the books to insert from a JSON file.

    Args:
        input_file (str): Path to a JSON file containing an array of book documents.

    Returns:
        list: List of book documents.

    Raises:
        ValueError: If the JSON content is not a list.
    """

    with open(input_file, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Input JSON must be a list of books.")
    logger.info(f"✅ Loaded {len(data)} books from {input_file}.")
    return data

def chunk_documents(documents, batch_size):
    """
    Splits a list of documents into batches of at most `batch_size` documents.

    Yields:
        list: A batch of documents.
    """

    for i in range(0, len(documents), batch_size):
        yield documents[i:i + batch_size]

def insert_books(collection, books, drop_existing=DROP_EXISTING, batch_size=BATCH_SIZE):
    """
    Inserts the books into the collection in batches.

    Args:
        collection: Target pymongo collection.
        books (list): Book documents to insert. They are copied, so the caller's dicts
            do not get an `_id` added.
        drop_existing (bool): Drop the collection before inserting.
        batch_size (int): Number of documents per `insert_many` call.

    Returns:
        int: Number of documents inserted.
    """

    if drop_existing:
        collection.drop()
        logger.info(f"🗑️ Dropped existing collection '{collection.name}'.")

    inserted = 0
    with tqdm(total=len(books), desc=f"Inserting into '{collection.name}'") as pbar:
        for batch in chunk_documents([dict(book) for book in books], batch_size):
            result = collection.insert_many(batch)
            inserted += len(result.inserted_ids)
            pbar.update(len(batch))

    logger.info(f"📚 Inserted {inserted} books into '{collection.name}'.")
    return inserted

##################################################################################################
#                                               MAIN                                             #
##################################################################################################

if __name__ == "__main__":
    try:
        books = load_books(INPUT_FILE)
        with MongoDBConnection(database_name=DATABASE_NAME, collection_name=COLLECTION_NAME) as conn:
            insert_books(conn.collection, books)
        logger.info("✅ Seeding completed successfully.")

    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")

    finally:
        logger.info("🔄 Process finished.")
