"""Storage adapters for CareBook.

This module contains storage adapters that implement the StoragePort interface
for loading and saving the address book.
"""

from carebook.adapters.storage.json_storage import JsonAddressBookStorage

__all__ = ["JsonAddressBookStorage"]
