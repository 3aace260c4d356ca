"""
Service identification prefix for every log line.
"""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'ticket-marketplace')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Containers get a stable hostname, local runs fall back to the pid
    instance = os.getenv('HOSTNAME') or f'{socket.gethostname()}:{os.getpid()}'

    return f'{service_name}@{deploy_env}:{instance}'
