import os
from typing import Optional

SECRETS_DIR = os.getenv("SECRETS_DIR", "/run/secrets")


def get_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Resolve a configuration value.

    Docker secrets mounted under SECRETS_DIR win over environment variables,
    which win over the default.
    """
    secret_path = os.path.join(SECRETS_DIR, name)
    if os.path.isfile(secret_path):
        with open(secret_path, "r") as f:
            return f.read().strip()

    return os.getenv(name, default)
