import logging
import time

from api.database import engine, metadata

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("init_db")

# Give the database a moment to start up
time.sleep(5)

logger.info("Creating users and user_skill_progress tables on %s", engine.url)
metadata.create_all(bind=engine)
logger.info("Tables created successfully.")
