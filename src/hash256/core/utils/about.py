from __future__ import annotations

import os
import platform
from importlib.metadata import PackageNotFoundError, version


def get_app_version() -> str:
    """App version: APP_VERSION env var (set by CI builds) or package metadata."""
    env_version = os.getenv("APP_VERSION", "").strip()
    if env_version:
        return env_version
    try:
        return version("hash256")
    except PackageNotFoundError:
        return "dev"


def getVersionInfo() -> dict:
    retDict = {}

    from hash256.core.utils.logging import get_log_file_path

    retDict["Hash256 version"] = get_app_version()
    retDict["Python version"] = platform.python_version()
    retDict["System"] = platform.system()
    retDict["Release"] = platform.release()
    retDict["Machine"] = platform.machine()
    retDict["Log file"] = str(get_log_file_path())

    return retDict
