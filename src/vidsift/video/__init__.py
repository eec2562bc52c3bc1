"""Video decoding and frame sampling."""

from .decoder import (
    CodecFaultError,
    Decoder,
    DecoderError,
    DecoderSession,
    MetadataUnavailableError,
    OpenCVDecoder,
    OpenCVSession,
    UnsupportedMediaError,
)
from .sampling import BatchSampler, SamplingReport, VideoOutcome, frame_timestamps

__all__ = [
    "CodecFaultError",
    "Decoder",
    "DecoderError",
    "DecoderSession",
    "MetadataUnavailableError",
    "OpenCVDecoder",
    "OpenCVSession",
    "UnsupportedMediaError",
    "BatchSampler",
    "SamplingReport",
    "VideoOutcome",
    "frame_timestamps",
]
