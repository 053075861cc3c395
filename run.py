import os
import sys
import argparse
import subprocess
import logging
from dotenv import load_dotenv

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Load environment variables from .env
load_dotenv()


def run_api(port: int, reload: bool):
    """Start the API server with uvicorn"""
    logger.info(f"Starting API server on port {port}...")
    command = [sys.executable, "-m", "uvicorn", "reparopro.main:app", "--host", "0.0.0.0", "--port", str(port)]
    if reload:
        command.append("--reload")
    try:
        subprocess.run(command, check=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"API server failed: {str(e)}")
        sys.exit(1)


def run_migrations():
    """Bring the database up to the latest alembic revision"""
    logger.info("Running database migrations...")
    try:
        subprocess.run([sys.executable, "-m", "alembic", "upgrade", "head"], check=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"Migration failed: {str(e)}")
        sys.exit(1)


def check_environment():
    """Warn about settings that fall back to development defaults"""
    optional_vars = ["DATABASE_URL", "JWT_SECRET", "OPENAI_API_KEY"]
    missing_vars = [var for var in optional_vars if not os.getenv(var)]

    if missing_vars:
        logger.warning(f"Using defaults for: {', '.join(missing_vars)}")
        if "OPENAI_API_KEY" in missing_vars:
            logger.warning("AI repair suggestions will be unavailable")

    logger.info("Environment checked")


def main():
    parser = argparse.ArgumentParser(description="Run ReparoPro components")
    parser.add_argument("--component", choices=["api", "init-db", "migrate"],
                        default="api", help="Component to run")
    parser.add_argument("--port", type=int, default=8079, help="API port")
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    parser.add_argument("--skip-checks", action="store_true", help="Skip the environment check")

    args = parser.parse_args()

    if not args.skip_checks:
        check_environment()

    if args.component == "api":
        run_api(args.port, reload=not args.no_reload)
    elif args.component == "init-db":
        from reparopro.db_init import init_db
        init_db()
    elif args.component == "migrate":
        run_migrations()


if __name__ == "__main__":
    main()
