"""kvhttp: async client for an HTTP key-value store."""

from .client import Client
from .codec import Codec, decode, encode
from .config import ClientConfig
from .errors import (
    CodecError,
    InvalidArgument,
    InvalidValue,
    KVError,
    NotFound,
    TransportFailure,
)
from .kv.base import KVStore
from .local import LOCAL_BASE_URL, LocalServer
from .patch import (
    MISSING,
    AddTo,
    Fields,
    Scalar,
    SetField,
    SubFrom,
    apply_instruction,
    apply_patch,
    classify,
    merge_fields,
    parse_patch,
)
from .store import connect
from .transport import HttpTransport, Transport

__all__ = [
    "AddTo",
    "Client",
    "ClientConfig",
    "Codec",
    "CodecError",
    "Fields",
    "HttpTransport",
    "InvalidArgument",
    "InvalidValue",
    "KVError",
    "KVStore",
    "LOCAL_BASE_URL",
    "LocalServer",
    "MISSING",
    "NotFound",
    "Scalar",
    "SetField",
    "SubFrom",
    "Transport",
    "TransportFailure",
    "apply_instruction",
    "apply_patch",
    "classify",
    "connect",
    "decode",
    "encode",
    "merge_fields",
    "parse_patch",
]
