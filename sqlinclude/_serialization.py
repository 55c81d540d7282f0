"""JSON encoding used by the structured log formatter."""

from typing import Any

import msgspec

__all__ = ("decode_json", "encode_json")

_encoder = msgspec.json.Encoder(enc_hook=str)
_decoder = msgspec.json.Decoder()


def encode_json(data: Any) -> str:
    """Encode ``data`` as a JSON string.

    Objects msgspec cannot serialize natively are rendered with :func:`str`.
    """
    return _encoder.encode(data).decode("utf-8")


def decode_json(data: "str | bytes") -> Any:
    return _decoder.decode(data)
