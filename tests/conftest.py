# tests/conftest.py
import pytest
import uuid
import mongomock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import os
import sys

# Add the src directory to the Python path to allow imports
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
src_path = os.path.join(project_root, 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from librolab.db.session import Base
# Import all models to ensure they are registered with Base
from librolab import models  # noqa: F401
from librolab.db.mock_impl import MockBooksDb
from librolab.db.mongo_impl import MongoBooksDb
from librolab.db.sql_impl import SqlBooksDb

# --- Test Database Setup ---
# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite://"
TEST_MONGO_URL = "mongodb://localhost:27017"

# Create a fixture for the SQLAlchemy engine (scoped to the session)
@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    # Create all tables defined in your models
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

# Create a fixture for the SQLAlchemy sessionmaker (scoped to the session)
@pytest.fixture(scope="session")
def db_session_factory(db_engine):
    """Returns a SQLAlchemy session factory."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

# Create a fixture for an individual test database session (scoped to function)
@pytest.fixture(scope="function")
def db_session(db_engine, db_session_factory):
    """Provides a transactional scope around a test function."""
    connection = db_engine.connect()
    # Begin a non-ORM transaction
    transaction = connection.begin()
    # Bind an individual Session to the connection
    session = db_session_factory(bind=connection)

    try:
        yield session # Test function runs here
    finally:
        session.close()
        # Rollback the transaction after the test, unless it was already handled
        if transaction.is_active:
            transaction.rollback()
        # Return the connection to the pool
        connection.close()

# --- Adapter fixtures ---

@pytest.fixture
def sql_books_db():
    """SqlBooksDb over a private in-memory SQLite database with all tables created."""
    books_db = SqlBooksDb(poolclass=StaticPool, connect_args={"check_same_thread": False})
    books_db.connect(TEST_DATABASE_URL)
    books_db.create_schema()
    yield books_db
    books_db.disconnect()

@pytest.fixture
def mongo_books_db():
    """MongoBooksDb over mongomock, with a database name unique to the test."""
    books_db = MongoBooksDb(
        database_name=f"library_test_{uuid.uuid4().hex}",
        client_factory=mongomock.MongoClient,
    )
    books_db.connect(TEST_MONGO_URL)
    yield books_db
    books_db.disconnect()

@pytest.fixture
def mock_books_db():
    books_db = MockBooksDb()
    books_db.connect()
    yield books_db
    books_db.disconnect()

@pytest.fixture(params=["mock", "sql", "mongo"])
def books_db(request):
    """Every adapter in turn, for the tests every backend must pass."""
    return request.getfixturevalue(f"{request.param}_books_db")

@pytest.fixture(params=["sql", "mongo"])
def store_books_db(request):
    """Only the adapters backed by a real store."""
    return request.getfixturevalue(f"{request.param}_books_db")
