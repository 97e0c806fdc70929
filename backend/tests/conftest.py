from pathlib import Path
import os
import tempfile
import pytest

# Point the app at a throwaway database before school_api is imported
_DB_DIR = Path(tempfile.mkdtemp(prefix="school_api_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test empty tables."""
    from school_api.database import create_db_and_tables, drop_db_and_tables
    drop_db_and_tables()
    create_db_and_tables()
    yield
