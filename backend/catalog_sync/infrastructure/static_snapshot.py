"""Static Snapshot File - reads and rewrites the catalog file bundled with the frontend.

Invariants:
    - read_entries() never raises for a missing, malformed or non-UTF-8 file: all mean
      "empty"
    - write_entries() replaces the file wholesale; the previous generation is kept
      at <path>.bak (single generation)
    - Writes go through a temp file + rename: readers never see a half-written file
    - `.js` paths are written as an ES module (`export const servicos = [...]`),
      anything else as plain JSON

Design Decisions:
    - The ES module body is emitted with json.dumps, so reading back is a regex to
      strip the module wrapper followed by json.loads (no JS parser needed)
"""

import json
import logging
import os
import re
import shutil
from datetime import date
from pathlib import Path

logger = logging.getLogger(__name__)

_MODULE_BODY = re.compile(
    r"export\s+const\s+servicos\s*=\s*(\[.*\])\s*;?\s*$", re.DOTALL,
)

_MODULE_HEADER = """/**
 * Dados de serviços para o Simulador de Preços
 * Última atualização: {updated}
 * ATENÇÃO: Este arquivo é gerado automaticamente pelo catalog-sync
 * Não edite manualmente!
 */

"""


class StaticSnapshotFile:
    """One snapshot file on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".bak")

    @property
    def is_module(self) -> bool:
        return self.path.suffix == ".js"

    def read_entries(self) -> list[dict]:
        if not self.path.exists():
            logger.info(
                f"Snapshot {self.path} not found, starting empty",
                extra={"target": "static_file"},
            )
            return []
        try:
            content = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            content = None
        entries = self._parse(content) if content is not None else None
        if entries is None:
            logger.warning(
                f"Snapshot {self.path} is malformed, treating as empty",
                extra={"target": "static_file"},
            )
            return []
        return entries

    def write_entries(self, entries: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            shutil.copy2(self.path, self.backup_path)
        body = json.dumps(entries, ensure_ascii=False, indent=2)
        if self.is_module:
            content = (
                _MODULE_HEADER.format(updated=date.today().strftime("%d/%m/%Y"))
                + f"export const servicos = {body};\n"
            )
        else:
            content = body + "\n"
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.info(
            f"Snapshot written: {len(entries)} services to {self.path}",
            extra={"target": "static_file"},
        )

    def _parse(self, content: str) -> list[dict] | None:
        if self.is_module:
            match = _MODULE_BODY.search(content)
            if not match:
                return None
            content = match.group(1)
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError:
            return None
        if not isinstance(parsed, list):
            return None
        return [entry for entry in parsed if isinstance(entry, dict)]
