"""
Inventory REST client package.

Generic entity CRUD client used by the OpenHMIS inventory module to talk to
the OpenMRS REST web services.
"""

__version__ = "1.0.0"
__author__ = "OpenHMIS Team"
__description__ = "Entity CRUD client for the OpenHMIS inventory REST API"

from .config import settings
from .entity_rest import EntityRestClient
from .exceptions import (
    HTTPStatusFailure,
    InventoryRestException,
    MissingFieldError,
    RequestTimeoutError,
    ServiceUnavailableError,
    TransportError,
)
from .logging_config import clear_request_id, set_request_id, setup_logging
from .messages import MessageCatalog
from .transport import RestfulService

__all__ = [
    "EntityRestClient",
    "RestfulService",
    "MessageCatalog",
    "InventoryRestException",
    "MissingFieldError",
    "TransportError",
    "RequestTimeoutError",
    "ServiceUnavailableError",
    "HTTPStatusFailure",
    "settings",
    "setup_logging",
    "set_request_id",
    "clear_request_id",
    "__version__",
]
