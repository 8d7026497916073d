import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import ContextManager, Dict, Optional, Union

from ..domain.exceptions import StorageException
from ..domain.storage import AbstractKeyValueStorage

logger = logging.getLogger(__name__)

# Caractères autorisés dans un nom de fichier dérivé d'une clé
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")

# Verrous par fichier, partagés par toutes les instances du processus:
# chaque requête HTTP crée son propre FileKeyValueStorage.
_file_locks: Dict[Path, ContextManager] = {}
_file_locks_guard = threading.Lock()


class InMemoryKeyValueStorage(AbstractKeyValueStorage):
    """Stockage volatil, utile pour les tests ou un processus unique."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def lock(self, key: str) -> ContextManager:
        return self._lock


class FileKeyValueStorage(AbstractKeyValueStorage):
    """Un fichier JSON par clé dans un dossier dédié.

    L'écriture passe par un fichier temporaire puis `os.replace`, de sorte qu'un
    lecteur ne voit jamais un enregistrement à moitié écrit.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def lock(self, key: str) -> ContextManager:
        """Sérialise les cycles lecture/écriture d'un même fichier entre threads."""
        path = self._path_for(key).resolve()
        with _file_locks_guard:
            return _file_locks.setdefault(path, threading.RLock())

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"[FileKeyValueStorage] Contenu non UTF-8 dans {path}: {e}")
            raise StorageException(f"cannot decode {path}", original_exception=e)
        except OSError as e:
            logger.error(f"[FileKeyValueStorage] Lecture impossible de {path}: {e}", exc_info=True)
            raise StorageException(f"cannot read {path}", original_exception=e)

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                    tmp_file.write(value)
                os.replace(tmp_name, path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"[FileKeyValueStorage] Écriture impossible de {path}: {e}", exc_info=True)
            raise StorageException(f"cannot write {path}", original_exception=e)
        logger.debug(f"[FileKeyValueStorage] Clé '{key}' écrite dans {path}")
