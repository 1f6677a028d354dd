"""Error hierarchy and error handling helpers."""

from .config import (  # noqa: F401
    BadTopicsError,
    ChannelsWithoutTopicError,
    ConfigurationError,
    ConnectionConfigError,
    EmptyChannelError,
    EmptyNickError,
    EmptyPasswordError,
    InvalidQOSError,
    NonOAuthPasswordError,
)
from .internal import (  # noqa: F401
    BrokerError,
    EncodingError,
    FatalStreamError,
    InternalError,
    NetworkError,
    ParsingError,
)
