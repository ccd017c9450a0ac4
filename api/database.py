# api/database.py

import os
from pathlib import Path
from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from sqlalchemy import (
    create_engine,
    MetaData,
    Table,
    Column,
    String,
    TIMESTAMP,
    Integer,
    Boolean,
    UniqueConstraint,
)
from sqlalchemy.engine import Connection
from neo4j import GraphDatabase, Driver

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bodylevel.db")

engine = create_engine(DATABASE_URL)
metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, index=True),
    Column("email", String, unique=True, index=True),
    Column("hashed_password", String, nullable=False),
    Column("is_active", Boolean, default=True),
    Column("is_admin", Boolean, nullable=False, default=False),
)

# One row per (user, skill) with any recorded activity. No status column:
# statuses are derived from these counters on every read.
user_skill_progress = Table(
    "user_skill_progress",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_email", String, nullable=False, index=True),
    Column("skill_id", String, nullable=False),
    Column("current_sets", Integer, nullable=False, default=0),
    Column("current_reps", Integer, nullable=False, default=0),
    Column("completed", Boolean, nullable=False, default=False),
    Column("last_updated", TIMESTAMP(timezone=True), nullable=False),
    UniqueConstraint("user_email", "skill_id", name="uq_user_skill_progress"),
)


def get_db() -> Connection:
    conn = engine.connect()
    try:
        yield conn
    finally:
        conn.close()


# neo4J

NEO4J_URI = os.getenv("NEO4J_URI")
NEO4J_USERNAME = os.getenv("NEO4J_USERNAME")
NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD")


# This class will manage the driver instance
class GraphDatabaseManager:
    def __init__(self):
        self.driver: Driver = None

    def connect(self):
        """Establishes the connection to the Neo4j database holding the skill catalog."""
        for name, value in (
            ("NEO4J_URI", NEO4J_URI),
            ("NEO4J_USERNAME", NEO4J_USERNAME),
            ("NEO4J_PASSWORD", NEO4J_PASSWORD),
        ):
            if not value:
                raise ValueError(f"Missing {name} environment variable. Cannot connect to Neo4j.")
        self.driver = GraphDatabase.driver(
            NEO4J_URI, auth=(NEO4J_USERNAME, NEO4J_PASSWORD)
        )

    def close(self):
        """Closes the connection."""
        if self.driver is not None:
            self.driver.close()
            self.driver = None


# Create a single instance of the manager for the application's lifecycle
graph_db_manager = GraphDatabaseManager()


# FastAPI dependency to get the database driver
def get_graph_db_driver() -> Driver:
    if graph_db_manager.driver is None:
        graph_db_manager.connect()
    return graph_db_manager.driver
