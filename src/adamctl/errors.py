"""Domain-specific errors for adamctl."""


class AdamError(Exception):
    """Base error for adamctl."""


class DecodeError(AdamError):
    """Base error for device replies that do not match the expected shape."""


class MalformedResponseError(DecodeError):
    """Raised when a reply does not start with the '!01' prefix."""


class TruncatedResponseError(DecodeError):
    """Raised when a status reply is too short to hold all channel fields."""


class TransportError(AdamError):
    """Base transport error (socket, DNS, unreachable host)."""


class TransportSendError(TransportError):
    """Raised when writing or reading a datagram fails."""


class TransportTimeoutError(TransportError):
    """Raised when the device stays silent for the whole wait window."""


class InvalidChannelError(AdamError, ValueError):
    """Raised for an output channel index outside 0-5."""


class SequenceAlreadyRunningError(AdamError):
    """Raised when a sequence is started while another run is active."""
