"""JSON File Storage Adapter.

This adapter implements the StoragePort contract for a single JSON document
holding the whole address book:

    {
        "records": [{"kind": "patient", "name": ..., ...}, ...],
        "shortcuts": {"ls": "list", ...}
    }

Architecture:
    - Implements StoragePort (Hexagonal Architecture)
    - Records are decoded through the ``Record`` tagged union, so the stored
      ``kind`` picks the model and every field is validated on load
    - Load failures are returned as failure Results carrying the path and the
      offending record index; nothing malformed is silently dropped
    - Saves are atomic: the document is written to a temp file in the target
      directory and then moved over the old file
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from carebook.domain.address_book import AddressBook
from carebook.domain.ports import DataLoadingError, DuplicateRecordError, Result, StorageError, StoragePort
from carebook.domain.records import Record

logger = logging.getLogger(__name__)

RECORD_LIST_ADAPTER = TypeAdapter(list[Record])
SHORTCUTS_ADAPTER = TypeAdapter(dict[str, str])


def _summarise_errors(error: PydanticValidationError) -> list[dict]:
    """Keep only the JSON-safe parts of pydantic's error list."""
    return [
        {"loc": list(detail["loc"]), "msg": detail["msg"], "type": detail["type"]}
        for detail in error.errors()
    ]


class JsonAddressBookStorage(StoragePort):
    """JSON implementation of StoragePort.

    Parameters:
        file_path: Location of the data file; parent directories are created
            on the first save

    Example Usage:
        ```python
        storage = JsonAddressBookStorage("data/carebook.json")
        result = storage.read_address_book()
        if result.is_success():
            book = result.value or AddressBook()
        ```
    """

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)

    def read_address_book(self) -> Result[Optional[AddressBook]]:
        path = str(self.file_path)
        if not self.file_path.exists():
            logger.info(f"Data file {path} not found")
            return Result.success_result(None)

        try:
            document = json.loads(self.file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            return self._load_failure(f"Could not read data file: {e}", {"path": path})
        except json.JSONDecodeError as e:
            return self._load_failure(
                f"Data file is not valid JSON: {e.msg}",
                {"path": path, "line": e.lineno, "column": e.colno},
            )

        if not isinstance(document, dict):
            return self._load_failure("Data file must contain a JSON object", {"path": path})

        try:
            records = RECORD_LIST_ADAPTER.validate_python(document.get("records", []))
        except PydanticValidationError as e:
            errors = _summarise_errors(e)
            location = errors[0].get("loc", ()) if errors else ()
            details: dict[str, Any] = {"path": path, "errors": errors}
            if location and isinstance(location[0], int):
                details["record_index"] = location[0]
            return self._load_failure(f"Data file contains invalid records ({e.error_count()} errors)", details)

        try:
            shortcuts = SHORTCUTS_ADAPTER.validate_python(document.get("shortcuts", {}))
        except PydanticValidationError as e:
            return self._load_failure(
                "Data file contains invalid shortcuts",
                {"path": path, "errors": _summarise_errors(e)},
            )

        try:
            address_book = AddressBook(records, shortcuts)
        except DuplicateRecordError as e:
            return self._load_failure(f"Data file contains duplicate persons: {e}", {"path": path})

        logger.info(f"Loaded {len(address_book)} records from {path}")
        return Result.success_result(address_book)

    def save_address_book(self, address_book: AddressBook) -> Result[int]:
        document = {
            "records": [self._dump_record(record) for record in address_book.records],
            "shortcuts": dict(address_book.shortcuts.items()),
        }

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self.file_path.name}.", suffix=".tmp", dir=self.file_path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, indent=2, ensure_ascii=False)
                    handle.write("\n")
                os.replace(temp_name, self.file_path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            error_msg = f"Failed to save data file: {e}"
            logger.error(error_msg, exc_info=True)
            return Result.failure_result(
                StorageError(error_msg, path=str(self.file_path)),
                error_type="StorageError",
                error_details={"path": str(self.file_path)},
            )

        logger.debug(f"Saved {len(document['records'])} records to {self.file_path}")
        return Result.success_result(len(document["records"]))

    def get_storage_info(self) -> Optional[dict]:
        """Get metadata about the data file.

        Returns:
            Optional[dict]: Path, existence and size of the data file
        """
        info: dict[str, Any] = {
            "format": "json",
            "path": str(self.file_path),
            "exists": self.file_path.exists(),
        }
        if info["exists"]:
            info["size"] = self.file_path.stat().st_size
        return info

    @staticmethod
    def _dump_record(record) -> dict:
        data = record.model_dump(mode="json")
        data["tags"] = sorted(record.tags)
        return data

    def _load_failure(self, message: str, details: dict) -> Result[Optional[AddressBook]]:
        logger.warning(f"{message} ({self.file_path})")
        return Result.failure_result(
            DataLoadingError(message, path=str(self.file_path)),
            error_type="DataLoadingError",
            error_details=details,
        )
