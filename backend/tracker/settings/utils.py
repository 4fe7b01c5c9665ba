"""
Utility functions for Django settings configuration.

Environment-specific configuration loading built on python-decouple, so each
deployment target reads its variables from its own .env file.
"""

import logging
from pathlib import Path

from decouple import Config, RepositoryEnv
from decouple import config as default_config

logger = logging.getLogger(__name__)

ENV_FILES = {
    "development": ".env.dev",
    "production": ".env.production",
    "test": ".env.test",
}


def load_environment_config(environment):
    """
    Load environment-specific configuration from the appropriate .env file.

    Args:
        environment (str): Target environment ('development', 'production', 'test')

    Returns:
        callable: A decouple config object bound to the environment file, or
                  the default decouple config when the file does not exist
    """
    env_file_name = ENV_FILES.get(environment, ".env")
    env_file_path = Path(__file__).resolve().parent.parent.parent.parent / env_file_name

    if env_file_path.exists():
        logger.info(
            "Loading environment configuration",
            extra={
                "environment": environment,
                "env_file": env_file_name,
                "action": "environment_config_loaded",
                "component": "settings",
            },
        )
        return Config(RepositoryEnv(env_file_path))

    logger.warning(
        "Environment file not found, using default config",
        extra={
            "environment": environment,
            "env_file": env_file_name,
            "action": "environment_config_fallback",
            "component": "settings",
            "severity": "low",
        },
    )
    return default_config
