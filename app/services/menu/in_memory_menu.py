"""In-memory menu provider."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from app.services.menu.base import MenuProvider

logger = logging.getLogger(__name__)

DEFAULT_MENU_FILE = Path(__file__).parent / "data" / "menu.yaml"


class InMemoryMenuProvider(MenuProvider):
    """Menu provider reading dish records from a YAML or JSON file."""

    def __init__(self, menu_file: Optional[str] = None):
        """Initialize with optional menu file path."""
        self.menu_file = Path(menu_file) if menu_file else DEFAULT_MENU_FILE
        self._records: Optional[List[Dict[str, Any]]] = None

    def _read_file(self) -> Any:
        with open(self.menu_file, "r", encoding="utf-8") as f:
            if self.menu_file.suffix == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    async def load_raw_records(self) -> List[Dict[str, Any]]:
        """Load raw dish records, reading the file at most once."""
        if self._records is None:
            if not self.menu_file.exists():
                logger.warning(f"[MENU] Menu file not found: {self.menu_file}")
                self._records = []
            else:
                data = self._read_file()
                # Accept either a bare list or a mapping with an "items" list
                if isinstance(data, dict):
                    data = data.get("items", [])
                self._records = [
                    record for record in (data or []) if isinstance(record, dict)
                ]
                logger.info(
                    f"[MENU] Read {len(self._records)} raw records from {self.menu_file}"
                )
        return self._records
