from sensorlink.protocol.decoder import (
    DecodeError,
    EmptyDecodeResult,
    Outcome,
    Parsed,
    Rejected,
    decode,
    decode_reading,
)
from sensorlink.protocol.reassembler import FrameReassembler, is_complete_json

__all__ = [
    "DecodeError",
    "EmptyDecodeResult",
    "Outcome",
    "Parsed",
    "Rejected",
    "decode",
    "decode_reading",
    "FrameReassembler",
    "is_complete_json",
]
