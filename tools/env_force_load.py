# tools/env_force_load.py — ensure .env is loaded for any entrypoint
from dotenv import find_dotenv, load_dotenv


def ensure_env_loaded(dotenv_path: str = "") -> bool:
    """Load .env without overriding variables already set in the process."""
    path = dotenv_path or find_dotenv(usecwd=True)
    if not path:
        return False
    return load_dotenv(path, override=False)
