"""
Message keys and localized text for client-side validation errors.
"""

from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from jproperties import Properties

REST_NAME_REQUIRED = "openhmis.inventory.general.error.restName"
UUID_REQUIRED = "openhmis.inventory.general.error.uuid"
RETIRED_REQUIRED = "openhmis.inventory.general.error.retired"
RETIRE_REASON_REQUIRED = "openhmis.inventory.general.error.retireReason"

DEFAULT_MESSAGES: Dict[str, str] = {
    REST_NAME_REQUIRED: "The REST entity name is required",
    UUID_REQUIRED: "The entity uuid is required",
    RETIRED_REQUIRED: "The retired status of the entity is required",
    RETIRE_REASON_REQUIRED: "A reason is required to retire the entity",
}


class MessageCatalog:
    """
    Lookup table from message keys to display text.

    Unknown keys resolve to the key itself so a missing translation still
    produces something identifiable in the UI and the logs.
    """

    def __init__(self, messages: Optional[Mapping[str, str]] = None) -> None:
        self._messages: Dict[str, str] = dict(DEFAULT_MESSAGES)
        if messages:
            self._messages.update(messages)

    def get(self, key: str) -> str:
        """
        Resolve a message key to its display text.

        Args:
            key: Message key, e.g. ``openhmis.inventory.general.error.uuid``

        Returns:
            The localized text, or the key itself when it is unknown
        """
        return self._messages.get(key, key)

    def update(self, messages: Mapping[str, str]) -> None:
        """Add or override entries; later entries win."""
        self._messages.update(messages)

    def __contains__(self, key: object) -> bool:
        return key in self._messages

    @classmethod
    def from_properties(
        cls, path: Union[str, Path], encoding: str = "utf-8"
    ) -> "MessageCatalog":
        """
        Load a catalog from a Java ``.properties`` file.

        Parsing follows the Java format, including ``\\uXXXX`` escapes,
        backslash line continuations and both ``=`` and ``:`` separators.
        Entries from the file override the defaults.

        Args:
            path: Location of the properties file
            encoding: File encoding, OpenMRS message bundles use UTF-8

        Returns:
            Catalog holding the defaults plus the file entries
        """
        properties = Properties()
        with open(path, "rb") as stream:
            properties.load(stream, encoding)

        return cls({key: value.data for key, value in properties.items()})


default_catalog = MessageCatalog()
