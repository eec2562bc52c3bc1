"""Sample frames from videos and store their fingerprints."""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from .decoder import (
    CodecFaultError,
    Decoder,
    DecoderSession,
    MetadataUnavailableError,
    UnsupportedMediaError,
)
from ..cancellation import CancellationToken, OperationCancelled
from ..config import Settings
from ..dedup.model import FrameSample, fingerprint_frame
from ..dedup.reduce import InvalidImage
from ..logging import get_logger
from ..storage.base import FingerprintStore

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class VideoOutcome(Enum):
    ANALYZED = "analyzed"
    FAILED = "failed"
    NO_METADATA = "no_metadata"
    NO_FRAMES = "no_frames"


@dataclass
class SamplingReport:
    """Summary of one sampling run."""
    requested: int = 0
    skipped_already_analyzed: int = 0
    analyzed: int = 0
    failed: int = 0
    frames_hashed: int = 0

    @property
    def processed(self) -> int:
        return self.analyzed + self.failed


def frame_timestamps(duration_ms: int, interval_ms: int, max_duration_ms: int) -> List[int]:
    """
    List the timestamps to sample, capped at ``max_duration_ms``.

    The upper bound is exclusive: a 10 s cap with a 1 s interval yields
    0, 1000, ..., 9000.
    """
    capped = min(duration_ms, max_duration_ms)
    return list(range(0, max(capped, 0), interval_ms))


class BatchSampler:
    """
    Fingerprint a batch of videos with a bounded number of decoder sessions.

    Videos already present in the store are skipped, so running the sampler
    again over the same list only picks up what is new or previously failed.
    A video ends up either fully recorded or with no records at all.
    """

    def __init__(
        self,
        decoder: Decoder,
        store: FingerprintStore,
        settings: Optional[Settings] = None,
    ) -> None:
        self._decoder = decoder
        self._store = store
        self._settings = settings or Settings()

    def run(
        self,
        video_ids: Iterable[str],
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> SamplingReport:
        """
        Sample and fingerprint every video that has not been analyzed yet.

        Args:
            video_ids: Video identifiers, in processing order
            cancel: Token to stop the run; in-flight videos purge their records
            progress: Called as ``progress(done, total)`` after each video

        Returns:
            SamplingReport with per-outcome counts

        Raises:
            OperationCancelled: If the run was cancelled; raised once every
                in-flight video has cleaned up
        """
        cancel = cancel or CancellationToken()
        requested = list(dict.fromkeys(video_ids))
        already = self._store.analyzed_video_ids()
        pending = [v for v in requested if v not in already]

        report = SamplingReport(
            requested=len(requested),
            skipped_already_analyzed=len(requested) - len(pending),
        )
        if not pending:
            logger.info("All requested videos are already analyzed")
            return report

        logger.info(
            f"Sampling {len(pending)} videos "
            f"({report.skipped_already_analyzed} already analyzed, "
            f"{self._settings.max_concurrent_sessions} concurrent sessions)"
        )

        cancelled = False
        with ThreadPoolExecutor(max_workers=self._settings.max_concurrent_sessions) as executor:
            futures: Dict[Future, str] = {
                executor.submit(self._process_video, video_id, cancel): video_id
                for video_id in pending
            }
            done = 0
            try:
                for future in as_completed(futures):
                    video_id = futures[future]
                    try:
                        outcome, frames = future.result()
                    except OperationCancelled:
                        cancelled = True
                        continue
                    if outcome is VideoOutcome.ANALYZED:
                        report.analyzed += 1
                        report.frames_hashed += frames
                    else:
                        report.failed += 1
                        logger.debug(f"{video_id} not analyzed: {outcome.value}")
                    done += 1
                    if progress is not None:
                        progress(done, len(pending))
            except BaseException:
                # Let workers purge their partial records before the pool shuts down.
                cancel.cancel()
                raise

        if cancelled or cancel.cancelled:
            logger.warning(f"Sampling cancelled after {report.processed} of {len(pending)} videos")
            raise OperationCancelled("Sampling was cancelled")

        logger.info(
            f"Sampling complete: {report.analyzed} analyzed, {report.failed} failed, "
            f"{report.frames_hashed} frames hashed"
        )
        return report

    def _process_video(self, video_id: str, cancel: CancellationToken):
        cancel.raise_if_cancelled()

        try:
            session = self._decoder.open(video_id)
        except (UnsupportedMediaError, OSError) as exc:
            logger.warning(f"Cannot decode {video_id}: {exc}")
            return VideoOutcome.FAILED, 0

        with session:
            try:
                duration_ms = session.duration_ms()
            except MetadataUnavailableError as exc:
                logger.warning(f"Skipping {video_id}: {exc}")
                return VideoOutcome.NO_METADATA, 0

            timestamps = frame_timestamps(
                duration_ms,
                self._settings.frame_interval_ms,
                self._settings.max_duration_ms,
            )
            try:
                frames = self._hash_frames(video_id, session, timestamps, cancel)
            except CodecFaultError as exc:
                logger.warning(f"Decoder error in {video_id}, discarding its frames: {exc}")
                self._store.delete_all_for_video(video_id)
                return VideoOutcome.FAILED, 0
            except BaseException:
                # Cancellation or a defect: never leave a half-analyzed video behind.
                self._store.delete_all_for_video(video_id)
                raise

        if frames == 0:
            logger.warning(f"No decodable frames in {video_id}")
            return VideoOutcome.NO_FRAMES, 0

        logger.debug(f"Analyzed {video_id}: {frames} frames")
        return VideoOutcome.ANALYZED, frames

    def _hash_frames(
        self,
        video_id: str,
        session: DecoderSession,
        timestamps: List[int],
        cancel: CancellationToken,
    ) -> int:
        frames = 0
        for timestamp_ms in timestamps:
            cancel.raise_if_cancelled()

            image = session.get_frame(timestamp_ms)
            if image is None:
                continue

            try:
                record = fingerprint_frame(FrameSample(video_id, timestamp_ms, image))
            except InvalidImage as exc:
                logger.debug(f"Skipping frame {timestamp_ms}ms of {video_id}: {exc}")
                continue

            self._store.insert(record)
            frames += 1
        return frames
