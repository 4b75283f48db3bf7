"""Client for the Hydra document and image text recognition API."""

__version__ = "0.1.0"

from .hydra_client.client import HydraClient
from .hydra_client.delivery import ChannelClosedError, ResultChannel
from .hydra_client.results import (
    ImageField,
    RecognizedFile,
    ScalarField,
    TableField,
)
from .hydra_client.types import RecognizeConfig
from .utils.error_taxonomy import (
    AuthenticationError,
    DataSourceNotFoundError,
    FieldNotFoundError,
    FieldTypeError,
    HydraAPIError,
    HydraError,
    InvalidConfigError,
    ResponseParseError,
    UnexpectedFieldShapeError,
    UnsupportedFileTypeError,
)

__all__ = [
    "HydraClient",
    "RecognizeConfig",
    "RecognizedFile",
    "ResultChannel",
    "ChannelClosedError",
    "ScalarField",
    "TableField",
    "ImageField",
    "HydraError",
    "UnsupportedFileTypeError",
    "InvalidConfigError",
    "AuthenticationError",
    "DataSourceNotFoundError",
    "HydraAPIError",
    "ResponseParseError",
    "FieldNotFoundError",
    "FieldTypeError",
    "UnexpectedFieldShapeError",
]
