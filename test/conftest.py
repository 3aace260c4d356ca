"""
Test Configuration

Unit tests (test/**/unit/) run against in-memory fakes of the unit of work
and the mock payment gateway; nothing here needs PostgreSQL or the network.
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sinks read these at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    os.environ['POSTGRES_DB'] = (
        'ticket_marketplace_test_db'
        if worker_id == 'master'
        else f'ticket_marketplace_test_db_{worker_id}'
    )

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['PAYMENT_PROVIDER'] = 'mock'
    os.environ['EMAIL_PROVIDER'] = 'mock'
    os.environ.setdefault('MOCK_PAYMENT_WEBHOOK_SECRET', 'test_webhook_secret')
    os.environ.setdefault('CREDENTIAL_SECRET', 'test_credential_secret')
    os.environ.setdefault('SECRET_KEY', 'test_jwt_secret')
    os.environ.setdefault('DB_POOL_SIZE_WRITE', '2')
    os.environ.setdefault('DB_POOL_SIZE_READ', '2')


# Call immediately to set env vars before any imports
_early_setup_test_environment()
