import logging
from pathlib import Path
from typing import Iterator, List

import typer

from .cancellation import CancellationToken, OperationCancelled
from .config import Settings
from .dedup.cluster import iter_duplicate_groups
from .logging import get_logger, set_package_level
from .storage.sqlite import SqliteFingerprintStore, StoreOpenError
from .video.decoder import Decoder, OpenCVDecoder
from .video.sampling import BatchSampler

logger = get_logger(__name__)

app = typer.Typer(help="vidsift – near-duplicate video finder", no_args_is_help=True)

VIDEO_SUFFIXES = {".mp4", ".mov", ".m4v", ".mkv", ".avi", ".webm", ".wmv", ".mpg", ".mpeg", ".3gp"}

DEFAULTS = Settings()


def make_decoder() -> Decoder:
    return OpenCVDecoder()


def iter_video_files(paths: List[Path]) -> Iterator[str]:
    """Yield video files, expanding directories recursively in sorted order."""
    for path in paths:
        if path.is_dir():
            for child in sorted(path.rglob("*")):
                if child.is_file() and child.suffix.lower() in VIDEO_SUFFIXES:
                    yield str(child)
        else:
            yield str(path)


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log per-video and per-frame details"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    if verbose:
        set_package_level(logging.DEBUG)
    elif quiet:
        set_package_level(logging.WARNING)


def _open_store(db: Path) -> SqliteFingerprintStore:
    try:
        return SqliteFingerprintStore(db)
    except StoreOpenError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc


@app.command()
def analyze(
    paths: List[Path] = typer.Argument(..., exists=True, readable=True, help="Video files or directories to analyze"),
    db: Path = typer.Option(DEFAULTS.database_path, "--db", help="Fingerprint database file"),
    concurrency: int = typer.Option(DEFAULTS.max_concurrent_sessions, min=1, help="Maximum concurrent decoder sessions"),
    interval_ms: int = typer.Option(DEFAULTS.frame_interval_ms, min=1, help="Milliseconds between sampled frames"),
    max_duration_ms: int = typer.Option(DEFAULTS.max_duration_ms, min=1, help="Only sample this far into each video"),
) -> None:
    """
    Sample frames from videos and store their perceptual hashes.

    Videos already in the database are skipped. Press Ctrl-C to cancel; videos
    in progress are removed from the database so they can be redone later.
    """
    settings = Settings(
        database_path=db,
        frame_interval_ms=interval_ms,
        max_duration_ms=max_duration_ms,
        max_concurrent_sessions=concurrency,
    )

    videos = list(iter_video_files(paths))
    if not videos:
        logger.warning("No video files found")
        return

    with _open_store(settings.database_path) as store:
        sampler = BatchSampler(make_decoder(), store, settings)
        cancel = CancellationToken()

        def report_progress(done: int, total: int) -> None:
            logger.info(f"[{done}/{total}] videos processed")

        try:
            report = sampler.run(videos, cancel=cancel, progress=report_progress)
        except (OperationCancelled, KeyboardInterrupt) as exc:
            logger.warning("Analysis cancelled; partially analyzed videos were discarded")
            raise typer.Exit(code=130) from exc

        typer.echo("\nAnalysis complete")
        typer.echo(f"Videos requested: {report.requested}")
        typer.echo(f"Already analyzed: {report.skipped_already_analyzed}")
        typer.echo(f"Newly analyzed: {report.analyzed}")
        typer.echo(f"Failed: {report.failed}")
        typer.echo(f"Frames hashed: {report.frames_hashed}")
        typer.echo(f"Analyzed videos in database: {store.count_distinct_analyzed_videos()}")


@app.command()
def compare(
    db: Path = typer.Option(DEFAULTS.database_path, "--db", help="Fingerprint database file"),
    threshold: float = typer.Option(
        DEFAULTS.similarity_threshold, min=0.0, max=1.0, help="Similarity a frame pair must exceed to match"
    ),
) -> None:
    """Find groups of likely duplicate videos among the analyzed ones."""

    with _open_store(db) as store:
        records = store.list_all()

    if not records:
        logger.warning(f"No fingerprints in {db}; run 'analyze' first")
        return

    logger.info(f"Comparing {len(records)} frame fingerprints")
    groups = 0
    try:
        for group in iter_duplicate_groups(records, threshold=threshold):
            groups += 1
            typer.echo(group.anchor)
            for candidate in group.candidates:
                typer.echo(f"    {candidate}")
    except KeyboardInterrupt as exc:
        logger.warning(f"Comparison cancelled after {groups} groups")
        raise typer.Exit(code=130) from exc

    typer.echo(f"\nPossible duplicate groups: {groups}")


@app.command()
def status(
    db: Path = typer.Option(DEFAULTS.database_path, "--db", help="Fingerprint database file"),
) -> None:
    """Show how many videos have been analyzed."""
    with _open_store(db) as store:
        typer.echo(f"Analyzed videos: {store.count_distinct_analyzed_videos()}")
        typer.echo(f"Stored frames: {store.count_records()}")


@app.command()
def reset(
    db: Path = typer.Option(DEFAULTS.database_path, "--db", help="Fingerprint database file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete every stored fingerprint."""
    if not yes:
        typer.confirm(f"Delete all fingerprints in {db}?", abort=True)

    with _open_store(db) as store:
        store.delete_all()
        typer.echo(f"Cleared {store.path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
