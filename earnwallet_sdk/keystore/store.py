"""
File-backed JSON store shared by embedded wallets and the wallet directory.
"""
import os
import json
import stat
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List

import appdirs
import portalocker

logger = logging.getLogger(__name__)

STORE_FILE_NAME = "store.json"


def default_store_path() -> str:
    """Per-user data directory for the platform, e.g. ~/.local/share/earnwallet on Linux"""
    return os.path.join(appdirs.user_data_dir("earnwallet"), STORE_FILE_NAME)


class KeyStore:
    """
    Thread-safe and process-safe JSON store split into named sections.

    Every read and write holds an exclusive lock on a sidecar ``.lock`` file.
    """

    def __init__(self, store_path: Optional[str] = None, lock_timeout: int = 10):
        """
        Initialize the store.

        Args:
            store_path: Path of the JSON file; defaults to EARNWALLET_KEY_STORE_PATH
                        or the platform user data directory
            lock_timeout: Seconds to wait for the file lock
        """
        path = store_path or os.environ.get("EARNWALLET_KEY_STORE_PATH") or default_store_path()
        self.store_path = Path(os.path.expanduser(path))
        self.lock_timeout = lock_timeout
        self._ensure_file()

    def _ensure_file(self):
        directory = self.store_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        if not self.store_path.exists():
            with open(self.store_path, 'w') as f:
                json.dump({}, f)

        # 0600 on the file; Windows has no equivalent through os.chmod
        if os.name == 'posix':
            os.chmod(self.store_path, stat.S_IRUSR | stat.S_IWUSR)

    @property
    def lock_path(self) -> str:
        return str(self.store_path) + '.lock'

    def _read_unlocked(self) -> Dict[str, Any]:
        try:
            with open(self.store_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, FileNotFoundError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_unlocked(self, data: Dict[str, Any]):
        with open(self.store_path, 'w') as f:
            json.dump(data, f, indent=2)

    def read(self) -> Dict[str, Any]:
        with portalocker.Lock(self.lock_path, timeout=self.lock_timeout):
            return self._read_unlocked()

    def get(self, section: str, key: str) -> Optional[Dict[str, Any]]:
        return self.read().get(section, {}).get(key)

    def put(self, section: str, key: str, value: Dict[str, Any]):
        """Insert or replace an entry; the read-modify-write runs under one lock"""
        with portalocker.Lock(self.lock_path, timeout=self.lock_timeout):
            data = self._read_unlocked()
            data.setdefault(section, {})[key] = value
            self._write_unlocked(data)

    def delete(self, section: str, key: str) -> bool:
        with portalocker.Lock(self.lock_path, timeout=self.lock_timeout):
            data = self._read_unlocked()
            if key not in data.get(section, {}):
                return False
            del data[section][key]
            self._write_unlocked(data)
            return True

    def list(self, section: str) -> List[Dict[str, Any]]:
        return list(self.read().get(section, {}).values())

    def clear(self):
        """Remove every section (for testing)"""
        with portalocker.Lock(self.lock_path, timeout=self.lock_timeout):
            self._write_unlocked({})
