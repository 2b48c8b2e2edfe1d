"""Python client for the uclbrt access-control service."""
__version__ = "1.0.7"

from .config import ClientSettings, load_settings  # noqa: E402
from .core.access import (  # noqa: E402
    CardType,
    DeviceCardService,
    KeyService,
    LinkService,
    RecordService,
    UclbrtClient,
)
from .core.exceptions import (  # noqa: E402
    UclbrtError,
    ConfigurationError,
    InvalidArgumentError,
    FormatError,
    TransportError,
    ServerError,
    UnexpectedResponseError,
    EncryptionError,
)

__all__ = [
    "__version__",
    "ClientSettings",
    "load_settings",
    "CardType",
    "UclbrtClient",
    "KeyService",
    "LinkService",
    "DeviceCardService",
    "RecordService",
    "UclbrtError",
    "ConfigurationError",
    "InvalidArgumentError",
    "FormatError",
    "TransportError",
    "ServerError",
    "UnexpectedResponseError",
    "EncryptionError",
]
