from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

import cv2
from PIL import Image

from ..logging import get_logger

logger = get_logger(__name__)


class DecoderError(Exception):
    """Base class for per-video decoding problems."""


class UnsupportedMediaError(DecoderError):
    """Raised when no decoder can be initialised for a video."""


class CodecFaultError(DecoderError):
    """Raised when the codec fails while decoding a frame."""


class MetadataUnavailableError(DecoderError):
    """Raised when a video's duration cannot be determined."""


class DecoderSession(Protocol):
    """An open decoder bound to one video. Not safe to share between threads."""

    def duration_ms(self) -> int: ...

    def get_frame(self, timestamp_ms: int) -> Optional[Image.Image]: ...

    def close(self) -> None: ...

    def __enter__(self) -> DecoderSession: ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None: ...


class Decoder(Protocol):
    def open(self, video_id: str) -> DecoderSession: ...


class OpenCVSession:
    def __init__(self, source: Path | str) -> None:
        self._path = Path(source)
        self._capture = self._open_capture(self._path)

    def duration_ms(self) -> int:
        """Return the video length in milliseconds from its frame count and rate."""
        frame_count = self._capture.get(cv2.CAP_PROP_FRAME_COUNT)
        fps = self._capture.get(cv2.CAP_PROP_FPS)
        if not fps or fps <= 0 or not frame_count or frame_count <= 0:
            raise MetadataUnavailableError(
                f"Cannot determine duration of {self._path} (frames={frame_count}, fps={fps})"
            )
        return int(frame_count / fps * 1000)

    def get_frame(self, timestamp_ms: int) -> Optional[Image.Image]:
        """
        Decode the frame shown at ``timestamp_ms``.

        Returns:
            RGB image, or None if the position yields no frame

        Raises:
            CodecFaultError: If OpenCV fails while seeking or decoding
        """
        fps = self._capture.get(cv2.CAP_PROP_FPS)
        frame_count = self._capture.get(cv2.CAP_PROP_FRAME_COUNT)
        try:
            if fps and fps > 0:
                # Some containers ignore millisecond seeks past the end.
                index = int(round(timestamp_ms / 1000.0 * fps))
                if frame_count and index >= frame_count:
                    return None
                self._capture.set(cv2.CAP_PROP_POS_FRAMES, index)
            else:
                self._capture.set(cv2.CAP_PROP_POS_MSEC, float(timestamp_ms))
            ok, frame = self._capture.read()
        except cv2.error as exc:
            raise CodecFaultError(f"Decoding {self._path} at {timestamp_ms}ms failed: {exc}") from exc

        if not ok or frame is None:
            logger.debug(f"No frame at {timestamp_ms}ms in {self._path}")
            return None

        return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))

    def close(self) -> None:
        """Release the capture. Safe to call more than once."""
        if getattr(self, '_capture', None) is not None:
            self._capture.release()
            self._capture = None

    def __enter__(self) -> OpenCVSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _open_capture(self, path: Path) -> cv2.VideoCapture:
        if not path.exists():
            raise FileNotFoundError(f"Video file does not exist: {path}")

        try:
            capture = cv2.VideoCapture(str(path))
        except cv2.error as exc:
            raise UnsupportedMediaError(f"Failed to open video: {path}") from exc

        if not capture.isOpened():
            capture.release()
            raise UnsupportedMediaError(f"No decoder available for: {path}")

        return capture


class OpenCVDecoder:
    """Opens video files on the local file system through OpenCV."""

    def open(self, video_id: str) -> OpenCVSession:
        return OpenCVSession(video_id)
