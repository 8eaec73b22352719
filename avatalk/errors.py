"""Error taxonomy for the avatar client.

Only ``CaptureUnavailable`` is fatal. Codec and network errors are recovered
by the session state machine, which falls back to Idle.
"""


class AvatalkError(Exception):
    """Base class for all avatalk errors."""


class CaptureUnavailable(AvatalkError):
    """No usable input device at session start."""


class CodecError(AvatalkError):
    """Audio payload could not be decoded."""


class MalformedContainer(CodecError):
    """Container or reply frame is not in the expected layout."""


class TruncatedPayload(CodecError):
    """Declared payload size exceeds the bytes actually present."""


class NetworkError(AvatalkError):
    """Failure talking to the inference service."""


class RequestTimeout(NetworkError):
    """No reply arrived within the configured bound."""


class RequestInFlight(NetworkError):
    """A request was submitted while another one is still awaiting its reply."""


class TransportUnreachable(NetworkError):
    """Connecting to or sending on the transport failed."""
