from reparopro.database import engine
from reparopro.models import Base
import logging

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Create the quote table when it does not exist yet."""
    try:
        Base.metadata.create_all(bind or engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
