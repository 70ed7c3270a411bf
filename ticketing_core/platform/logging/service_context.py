"""
Service context for log lines.

Identifies which service instance produced a log line, both in containers and locally.
"""

from functools import lru_cache
import os

from ticketing_core.platform.config.core_setting import settings


@lru_cache(maxsize=1)
def get_service_context() -> str:
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Pod/container hostname when orchestrated, PID otherwise
    instance = os.getenv('HOSTNAME', '')
    instance = instance[:12] if instance else str(os.getpid())

    return f'{settings.SERVICE_NAME}@{deploy_env}:{instance}'
