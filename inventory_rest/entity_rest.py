"""
Entity CRUD client for the inventory module.

Provides entity-agnostic load/save/retire/purge operations parameterized by
the REST entity name. Each operation checks that its required fields are
present and forwards to the REST transport. Missing fields are reported to
the error callback as a ``MissingFieldError`` carrying a localized message;
the transport is not called in that case.
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from .config import settings
from .exceptions import MissingFieldError
from .logging_config import get_logger
from .messages import (
    REST_NAME_REQUIRED,
    RETIRE_REASON_REQUIRED,
    RETIRED_REQUIRED,
    UUID_REQUIRED,
    MessageCatalog,
    default_catalog,
)
from .transport import Callback, RestfulService, invoke_callback

logger = get_logger(__name__)

REST_ENTITY_NAME = "rest_entity_name"
RESOURCE = "resource"
NON_EMPTY_FIELDS = frozenset({"uuid"})

FieldCheck = Tuple[Mapping[str, Any], str, str]


class EntityRestClient:
    """
    CRUD facade over a :class:`RestfulService`.

    Input dicts are never modified; each operation works on a shallow copy.

    Attributes:
        transport: REST transport the calls are delegated to
        catalog: Message catalog used to localize validation errors
    """

    def __init__(
        self,
        transport: Optional[RestfulService] = None,
        catalog: Optional[MessageCatalog] = None,
    ) -> None:
        self.transport = transport or RestfulService()
        self.catalog = catalog or default_catalog

    def set_custom_base_url(self, url: str) -> None:
        """Use an arbitrary base URL for subsequent calls."""
        self.transport.set_base_url(url)

    def set_base_url(self, resource: str, version: Optional[str] = None) -> None:
        """
        Point the transport at a module's REST namespace.

        Args:
            resource: Module resource name, e.g. ``inventory``
            version: REST API version, defaults to the configured one
        """
        self.transport.set_base_url(settings.rest_base_url(resource, version))

    def _first_missing(self, *checks: FieldCheck) -> Optional[MissingFieldError]:
        """
        Find the first required field that is absent.

        Fields are checked by key presence, except ``uuid``, which also
        counts as missing when None or empty since it forms the entity URL.

        Returns:
            Error for the first missing field, or None if all are present
        """
        for mapping, field_name, message_key in checks:
            missing = field_name not in mapping
            if field_name in NON_EMPTY_FIELDS and not missing:
                missing = mapping[field_name] in (None, "")
            if missing:
                return MissingFieldError(
                    field_name, message_key, self.catalog.get(message_key)
                )
        return None

    async def _reject(
        self,
        operation: str,
        error: MissingFieldError,
        on_error: Optional[Callback],
    ) -> None:
        """Log a validation failure and pass it to the error callback."""
        logger.error(
            f"ERROR:::{error.message_key}",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "field": error.field_name,
                    "error_message": error.message,
                }
            },
        )
        await invoke_callback(on_error, error)

    async def load_entity(
        self,
        base_params: Mapping[str, Any],
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """Load one entity. Requires ``rest_entity_name`` and ``uuid``."""
        error = self._first_missing(
            (base_params, REST_ENTITY_NAME, REST_NAME_REQUIRED),
            (base_params, "uuid", UUID_REQUIRED),
        )
        if error is not None:
            await self._reject("load_entity", error, on_error)
            return None

        return await self.transport.get_one(
            base_params[REST_ENTITY_NAME], base_params["uuid"], on_success, on_error
        )

    async def check_existing_entity(
        self,
        rest_entity_name: str,
        search_query: str,
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """Look up at most one entity, retired ones included, matching a name."""
        params = {
            "includeAll": True,
            "q": search_query,
            "startIndex": 1,
            "limit": 1,
        }
        return await self.transport.get_all(
            rest_entity_name, params, on_success, on_error
        )

    async def save_or_update_entity(
        self,
        base_params: Mapping[str, Any],
        record: Mapping[str, Any],
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """
        Persist a new entity or update an existing one.

        A record with a non-empty ``uuid`` updates that entity. Otherwise it
        is created and ``uuid`` and ``retireReason`` are not sent. ``purge``
        is never sent.

        Args:
            base_params: Must hold ``rest_entity_name``
            record: Entity fields to send
            on_success: Called with the saved entity
            on_error: Called with the validation or transport error

        Returns:
            The saved entity, or None on failure
        """
        error = self._first_missing((base_params, REST_ENTITY_NAME, REST_NAME_REQUIRED))
        if error is not None:
            await self._reject("save_or_update_entity", error, on_error)
            return None

        payload: Dict[str, Any] = dict(record)
        uuid = payload.get("uuid")
        if uuid in (None, ""):
            uuid = ""
            payload.pop("uuid", None)
            payload.pop("retireReason", None)

        payload.pop("purge", None)

        return await self.transport.save_or_update(
            base_params[REST_ENTITY_NAME], uuid, payload, on_success, on_error
        )

    async def retire_or_unretire_entity(
        self,
        base_params: Mapping[str, Any],
        record: Mapping[str, Any],
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """
        Toggle the retired state of an entity.

        The record's current ``retired`` value decides the direction: a
        non-retired entity is retired with its ``retireReason``, a retired one
        is saved back with ``retired`` cleared.

        Args:
            base_params: Must hold ``rest_entity_name``
            record: Must hold ``uuid`` and ``retired``
            on_success: Called with the server response
            on_error: Called with the validation or transport error

        Returns:
            The server response, or None on failure
        """
        error = self._first_missing(
            (base_params, REST_ENTITY_NAME, REST_NAME_REQUIRED),
            (record, "uuid", UUID_REQUIRED),
            (record, "retired", RETIRED_REQUIRED),
        )
        if error is not None:
            await self._reject("retire_or_unretire_entity", error, on_error)
            return None

        rest_entity_name = base_params[REST_ENTITY_NAME]
        payload: Dict[str, Any] = dict(record)
        payload.pop("purge", None)
        uuid = payload["uuid"]

        if not payload["retired"]:
            error = self._first_missing((payload, "retireReason", RETIRE_REASON_REQUIRED))
            if error is not None:
                await self._reject("retire_or_unretire_entity", error, on_error)
                return None

            return await self.transport.remove(
                rest_entity_name,
                uuid,
                {"reason": payload["retireReason"]},
                on_success,
                on_error,
            )

        payload["retired"] = False
        payload.pop("retireReason", None)
        return await self.transport.save_or_update(
            rest_entity_name, uuid, payload, on_success, on_error
        )

    async def purge_entity(
        self,
        base_params: Mapping[str, Any],
        record: Mapping[str, Any],
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """Permanently delete an entity. Requires ``rest_entity_name`` and ``uuid``."""
        error = self._first_missing(
            (base_params, REST_ENTITY_NAME, REST_NAME_REQUIRED),
            (record, "uuid", UUID_REQUIRED),
        )
        if error is not None:
            await self._reject("purge_entity", error, on_error)
            return None

        return await self.transport.remove(
            base_params[REST_ENTITY_NAME],
            record["uuid"],
            {"purge": True},
            on_success,
            on_error,
        )

    async def load_entities(
        self,
        request_params: Mapping[str, Any],
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """
        Load a collection of entities.

        ``rest_entity_name`` selects the entity; every other key is sent as a
        query parameter (``q``, ``limit``, ``startIndex``, ``includeAll`` ...).
        """
        error = self._first_missing((request_params, REST_ENTITY_NAME, REST_NAME_REQUIRED))
        if error is not None:
            await self._reject("load_entities", error, on_error)
            return None

        params = dict(request_params)
        rest_entity_name = params.pop(REST_ENTITY_NAME)
        return await self.transport.get_all(
            rest_entity_name, params, on_success, on_error
        )

    async def load_results(
        self,
        request_params: Mapping[str, Any],
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """
        Load results that are not OpenMRS data objects, e.g. report rows.

        An optional ``resource`` key names the resource; without it the base
        URL itself is queried.
        """
        params = dict(request_params)
        resource = params.pop(RESOURCE, None)
        return await self.transport.get_all(resource, params, on_success, on_error)

    async def post(
        self,
        resource: str,
        payload: Any,
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """Send a raw POST through the transport."""
        return await self.transport.post(resource, payload, on_success, on_error)
