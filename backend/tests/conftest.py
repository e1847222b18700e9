"""
Point the app at a throwaway sqlite database and build the schema.
Runs before any test module imports app.main.
"""
import os
import tempfile

_db_file = os.path.join(tempfile.mkdtemp(prefix="loaf-tests-"), "test.db")
os.environ["DB_URL"] = f"sqlite+pysqlite:///{_db_file}"
os.environ["SECRET_KEY"] = "test-secret-not-for-prod"

from app.db import Base, engine  # noqa: E402
from app import models  # noqa: E402,F401

Base.metadata.create_all(engine)
