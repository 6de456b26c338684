##################################################################################################
#                                        SCRIPT OVERVIEW                                         #
#                                                                                                #
# This script connects to the bookstore MongoDB collection and runs a fixed sequence of queries: #
# reads with projections, a price update, a delete by year, filtered/sorted/paginated reads,     #
# aggregation pipelines, index creation and listing, sorting, and an `explain` comparison of an  #
# indexed and a non-indexed query.                                                               #
#                                                                                                #
# Key Features:                                                                                  #
# - Every step runs to completion before the next one starts.                                    #
# - A single error boundary: any failure stops the sequence and is logged.                       #
# - The connection is always closed, whatever the outcome.                                       #
# - Already adjusted books are skipped by the price update, so reruns do not compound prices.    #
#                                                                                                #
# Run from the repository root: `python -m scripts.bookstore_queries`                            #
##################################################################################################

##################################################################################################
#                                            IMPORTS                                             #
##################################################################################################

from utils.database_connections import MongoDBConnection            # Database connection
from utils.logs_config import logger                                # Logs and events
from bson import json_util                                          # JSON dumps of BSON values

##################################################################################################
#                                        CONFIGURATION                                           #
##################################################################################################

DATABASE_NAME = "plp_bookstore"     # Source database
COLLECTION_NAME = "books"           # Source collection

# Fields returned by the read queries
BOOK_PROJECTION = {"title": 1, "author": 1, "price": 1, "_id": 0}

TARGET_GENRE = "Fantasy"            # Genre read and repriced
PRICE_FACTOR = 1.1                  # +10%
PRICE_ADJUSTED_FLAG = "price_adjusted"

YEAR_THRESHOLD = 1950               # Books published before this year are deleted

PAGE_SIZE = 5
TOP_BOOKS_LIMIT = 3
TOP_AUTHORS_LIMIT = 5

# Single and compound index keys
TITLE_INDEX = [("title", 1)]
AUTHOR_YEAR_INDEX = [("author", 1), ("published_year", 1)]

INDEXED_QUERY = {"title": "The Alchemist"}      # Served by the title index
NON_INDEXED_QUERY = {"price": 10.99}            # Collection scan

##################################################################################################
#                                        CRUD OPERATIONS                                         #
##################################################################################################

def format_book(book):
    return f"  - {book.get('title')} by {book.get('author')} (${book.get('price')})"


def log_books(books):
    for book in books:
        logger.info(format_book(book))


def find_books_by_genre(collection, genre=TARGET_GENRE):
    books = list(collection.find({"genre": genre}, BOOK_PROJECTION))
    logger.info(f"📚 Found {len(books)} {genre} books: {books}")
    return books


def increase_genre_prices(collection, genre=TARGET_GENRE, factor=PRICE_FACTOR):
    """
    Multiplies the price of every book of the given genre by `factor`.

    Updated books are flagged with `price_adjusted: true` and books already flagged are left
    alone, so running the script twice against the same data does not compound the increase.

    Returns:
        int: Number of books modified.
    """

    result = collection.update_many(
        {"genre": genre, PRICE_ADJUSTED_FLAG: {"$ne": True}},
        {"$mul": {"price": factor}, "$set": {PRICE_ADJUSTED_FLAG: True}},
    )
    logger.info(f"✏️ Updated {result.modified_count} {genre} book prices by {round((factor - 1) * 100)}%.")
    return result.modified_count


def delete_books_before(collection, year=YEAR_THRESHOLD):
    result = collection.delete_many({"published_year": {"$lt": year}})
    logger.info(f"🗑️ Deleted {result.deleted_count} books published before {year}.")
    return result.deleted_count

##################################################################################################
#                                        ADVANCED QUERIES                                        #
##################################################################################################

def find_in_stock_after(collection, year=YEAR_THRESHOLD):
    books = list(collection.find({"in_stock": True, "published_year": {"$gt": year}}, BOOK_PROJECTION))
    logger.info(f"📘 Books in stock & published after {year}: {books}")
    return books


def find_most_expensive(collection, limit=TOP_BOOKS_LIMIT):
    books = list(collection.find({}, BOOK_PROJECTION).sort("price", -1).limit(limit))
    logger.info(f"📕 Top {limit} most expensive books: {books}")
    return books


def find_page(collection, page, page_size=PAGE_SIZE):
    """
    Returns one page of books sorted by title. Pages are zero-based.

    `_id` breaks ties between equal titles so a book never shows up on two pages.
    """

    return list(
        collection.find({}, BOOK_PROJECTION)
        .sort([("title", 1), ("_id", 1)])
        .skip(page * page_size)
        .limit(page_size)
    )

##################################################################################################
#                                      AGGREGATION PIPELINES                                     #
##################################################################################################

def avg_price_by_pipeline(group_field, limit=None):
    """
    Builds a pipeline grouping books by `group_field` with their average price and count,
    sorted by average price (highest first) and optionally limited.
    """

    pipeline = [
        {"$group": {"_id": f"${group_field}", "avgPrice": {"$avg": "$price"}, "totalBooks": {"$sum": 1}}},
        {"$sort": {"avgPrice": -1}},
    ]
    if limit is not None:
        pipeline.append({"$limit": limit})
    return pipeline


def most_books_author_pipeline():
    return [
        {"$group": {"_id": "$author", "bookCount": {"$sum": 1}}},
        {"$sort": {"bookCount": -1}},
        {"$limit": 1},
    ]


def books_by_decade_pipeline():
    # 1987 -> "1980s"
    decade = {"$subtract": ["$published_year", {"$mod": ["$published_year", 10]}]}
    return [
        {"$group": {"_id": {"$concat": [{"$toString": decade}, "s"]}, "count": {"$sum": 1}}},
        {"$sort": {"_id": 1}},
    ]


def top_authors_by_avg_price(collection, limit=TOP_AUTHORS_LIMIT):
    authors = list(collection.aggregate(avg_price_by_pipeline("author", limit)))
    for a in authors:
        logger.info(f"  - {a['_id']}: ${a['avgPrice']:.2f} ({a['totalBooks']} books)")
    return authors


def avg_price_by_genre(collection):
    genres = list(collection.aggregate(avg_price_by_pipeline("genre")))
    logger.info("📊 Average book price by genre:")
    for g in genres:
        logger.info(f"  - {g['_id']}: ${g['avgPrice']:.2f} ({g['totalBooks']} books)")
    return genres


def author_with_most_books(collection):
    result = list(collection.aggregate(most_books_author_pipeline()))
    if not result:
        logger.info("No authors found in the collection.")
        return None
    author = result[0]
    logger.info(f"🏆 Author with most books: {author['_id']} ({author['bookCount']} books)")
    return author


def books_by_decade(collection):
    decades = list(collection.aggregate(books_by_decade_pipeline()))
    logger.info("📚 Books grouped by publication decade:")
    for d in decades:
        logger.info(f"  - {d['_id']}: {d['count']} books")
    return decades

##################################################################################################
#                                            INDEXING                                            #
##################################################################################################

def create_book_indexes(collection):
    title_index = collection.create_index(TITLE_INDEX)
    logger.info("✅ Created index on 'title' field.")

    compound_index = collection.create_index(AUTHOR_YEAR_INDEX)
    logger.info("✅ Created compound index on 'author' and 'published_year' fields.")
    return [title_index, compound_index]


def list_book_indexes(collection):
    indexes = collection.index_information()
    logger.info(f"📄 Current indexes on '{collection.name}' collection: {indexes}")
    return indexes

##################################################################################################
#                                             SORTING                                            #
##################################################################################################

def sort_books_by_price(collection, direction=1):
    books = list(collection.find({}, BOOK_PROJECTION).sort("price", direction))
    label = "Ascending" if direction == 1 else "Descending"
    logger.info(f"{'⬆️' if direction == 1 else '⬇️'} Books sorted by price ({label}):")
    log_books(books)
    return books

##################################################################################################
#                                        INDEX PERFORMANCE                                       #
##################################################################################################

def explain_query(database, collection_name, query):
    """
    Asks the server how it resolves `query` and returns the `executionStats` section
    (documents examined, keys examined, execution time...).

    Uses the `explain` command directly because `Cursor.explain()` does not accept a
    verbosity level.
    """

    plan = database.command(
        "explain",
        {"find": collection_name, "filter": query},
        verbosity="executionStats",
    )
    return plan.get("executionStats", {})


def compare_index_performance(collection):
    indexed_stats = explain_query(collection.database, collection.name, INDEXED_QUERY)
    logger.info("📊 Indexed query explain plan:")
    logger.info(json_util.dumps(indexed_stats, indent=2))

    non_indexed_stats = explain_query(collection.database, collection.name, NON_INDEXED_QUERY)
    logger.info("📉 Non-indexed query explain plan:")
    logger.info(json_util.dumps(non_indexed_stats, indent=2))
    return indexed_stats, non_indexed_stats

##################################################################################################
#                                         RUN SEQUENCE                                           #
##################################################################################################

def run_queries(collection):
    """
    Runs every query step in order against `collection`.

    Steps are not isolated from each other: the first exception stops the sequence and
    propagates to the caller.
    """

    logger.info("--- 1. CRUD OPERATIONS ---")
    find_books_by_genre(collection)
    increase_genre_prices(collection)
    delete_books_before(collection)

    logger.info("--- 2. ADVANCED QUERIES ---")
    find_in_stock_after(collection)
    find_most_expensive(collection)
    for page in (0, 1):
        logger.info(f"📄 Pagination - Page {page + 1} ({PAGE_SIZE} books, sorted by title):")
        log_books(find_page(collection, page))

    logger.info(f"--- 3. AGGREGATION: Top {TOP_AUTHORS_LIMIT} authors by average book price ---")
    top_authors_by_avg_price(collection)

    logger.info("--- 4. AGGREGATION: Average price by genre ---")
    avg_price_by_genre(collection)

    logger.info("--- 5. AGGREGATION: Author with most books ---")
    author_with_most_books(collection)

    logger.info("--- 6. AGGREGATION: Books grouped by publication decade ---")
    books_by_decade(collection)

    logger.info("--- 7. INDEXING ---")
    create_book_indexes(collection)
    list_book_indexes(collection)

    logger.info("--- 8. SORTING ---")
    sort_books_by_price(collection, 1)
    sort_books_by_price(collection, -1)

    logger.info("--- 9. INDEX PERFORMANCE TEST (explain) ---")
    compare_index_performance(collection)

    logger.info("✅ Query execution complete.")


def main(connection=None):
    """
    Opens the bookstore connection, runs the query sequence and always closes the connection.

    Errors are logged, not raised.

    Returns:
        bool: True when every step completed.
    """

    try:
        conn = connection or MongoDBConnection(database_name=DATABASE_NAME, collection_name=COLLECTION_NAME)
        with conn:
            logger.info(f"🔗 Connected to MongoDB | DATABASE: {conn.database.name} | COLLECTION: {conn.collection.name}")
            run_queries(conn.collection)
        return True

    except Exception as e:
        logger.error(f"❌ Error occurred: {e}")
        return False

    finally:
        logger.info("🔄 Process finished.")

##################################################################################################
#                                               MAIN                                             #
##################################################################################################

if __name__ == "__main__":
    main()
