from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


class FeedStore:
    """
    Slot único en disco para el último feed publicado.

    Las escrituras van a un archivo temporal en el mismo directorio y se
    reemplazan con os.replace, así un lector ve el archivo anterior completo
    o el nuevo completo, nunca uno truncado.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def stat(self) -> os.stat_result | None:
        try:
            return self.path.stat()
        except FileNotFoundError:
            return None

    def open(self) -> BinaryIO:
        """Raises FileNotFoundError when nothing has been published yet."""
        return open(self.path, "rb")

    def read_text(self) -> str:
        with self.open() as fh:
            return fh.read().decode("utf-8")

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(text.encode("utf-8"))
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.info("Published %s (%d bytes)", self.path, len(text.encode("utf-8")))
