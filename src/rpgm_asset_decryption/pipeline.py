"""Batch decryption pipeline.

This module fans the encrypted assets of a game out over a thread pool,
decrypts each one, writes the restored file next to it (or under an output
directory) and gathers per-file outcomes into a BatchReport. A failing file
never stops the others.
"""

import os
import shutil
import sys
import tempfile
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from .core.errors import ErrorKind, FrameError
from .core.frame import decrypt_frame, decrypt_frame_keyless, verify_frame
from .core.game import GameRoot
from .core.types import BatchReport, DecryptionJob, EncryptedFile, EncryptionKey, JobOutcome
from .registry import DEFAULT_CHAIN, KeySourceRegistry
from .scanner import AssetScanner, validate_path_safety
from .sources.base import KeySource, resolve_key

# Print a progress line every this many finished jobs
PROGRESS_EVERY = 100


def default_workers() -> int:
    return os.cpu_count() or 1


def current_umask() -> int:
    # Briefly changes the process umask, so not for use from worker threads
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_atomic(destination: Path, content: bytes, source: Path | None = None) -> int:
    """Write ``content`` to ``destination`` through a temporary file.

    The temporary file lives in the destination directory so the final
    rename never crosses filesystems. It is created owner-only, so its mode
    is set before the rename: copied from ``source`` when given, otherwise
    what a plain write under the current umask would produce.

    Args:
        destination: Final path of the file
        content: Bytes to write
        source: File whose permission bits the result takes over

    Returns:
        Number of bytes written

    Raises:
        OSError: If writing or renaming fails. The temporary file is removed.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        if source is not None:
            shutil.copymode(source, tmp_name)
        else:
            os.chmod(tmp_name, 0o666 & ~current_umask())
        os.replace(tmp_name, destination)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
    return len(content)


class DecryptionPipeline:
    """Decrypt every encrypted asset of one game.

    Example:
        >>> game = GameRoot.detect(Path('/games/SomeTitle'))
        >>> key, _ = resolve_key(game, KeySourceRegistry.create_chain())
        >>> report = DecryptionPipeline(game, key).run()
        >>> print(report.success_count, report.failure_count)
    """

    def __init__(
        self,
        game: GameRoot,
        key: EncryptionKey | None,
        workers: int | None = None,
        output_dir: Path | None = None,
        strict: bool = False,
        progress: bool = False,
    ):
        """Initialize the pipeline.

        Args:
            game: The game whose assets are decrypted
            key: The game's key. None selects keyless header substitution,
                which only works for PNG assets.
            workers: Size of the thread pool, defaults to the CPU count
            output_dir: Write restored files under this directory, mirroring
                the game's layout, instead of next to the encrypted files
            strict: Treat a magic mismatch after decryption as a failure
            progress: Print progress lines to stderr
        """
        self.game = game
        self.key = key
        self.workers = workers or default_workers()
        self.output_dir = output_dir.resolve() if output_dir else None
        self.strict = strict
        self.progress = progress

    def destination_for(self, encrypted: EncryptedFile) -> Path:
        """Compute where the restored file of ``encrypted`` is written.

        Raises:
            ValueError: If the destination would escape the output directory
        """
        kind = encrypted.kind
        name = encrypted.path.name
        restored_name = name[: -len(kind.source_extension)] + kind.target_extension

        if self.output_dir is None:
            return encrypted.path.with_name(restored_name)

        relative = encrypted.path.parent.relative_to(self.game.content_root)
        destination = self.output_dir / relative / restored_name
        validate_path_safety(destination, self.output_dir)
        return destination

    def create_jobs(
        self, files: Iterable[EncryptedFile], report: BatchReport
    ) -> list[DecryptionJob]:
        """Turn files into jobs.

        A file whose destination can't be computed, or would escape the
        output directory, gets no job and is recorded as a failure in
        ``report`` instead.
        """
        jobs = []
        for encrypted in files:
            try:
                destination = self.destination_for(encrypted)
            except ValueError as e:
                report.record(JobOutcome.failure(encrypted.path, ErrorKind.IO_ERROR, str(e)))
                continue
            jobs.append(DecryptionJob(file=encrypted, key=self.key, destination=destination))
        return jobs

    def run_job(self, job: DecryptionJob) -> JobOutcome:
        """Read, decrypt and write one file. Never raises for file problems."""
        path = job.file.path
        try:
            data = path.read_bytes()

            if job.key is None:
                restored = decrypt_frame_keyless(data, job.file.kind)
            else:
                restored = decrypt_frame(data, job.key)

            warnings = verify_frame(data, restored, job.file.kind, strict=self.strict)
            written = write_atomic(job.destination, restored, source=path)
        except FrameError as e:
            return JobOutcome.failure(path, e.kind or ErrorKind.IO_ERROR, str(e))
        except PermissionError as e:
            return JobOutcome.failure(path, ErrorKind.PERMISSION_DENIED, str(e))
        except OSError as e:
            return JobOutcome.failure(path, ErrorKind.IO_ERROR, str(e))

        return JobOutcome.success(path, job.destination, written, warnings)

    def _print_failure(self, outcome: JobOutcome) -> None:
        print(
            f"Error: {outcome.path}: {outcome.error_kind.value}: {outcome.detail}",  # type: ignore[union-attr]
            file=sys.stderr,
        )

    def run(self, files: Iterable[EncryptedFile] | None = None) -> BatchReport:
        """Decrypt the given files, or every encrypted asset of the game.

        Args:
            files: Files to decrypt. When None the game tree is scanned.

        Returns:
            BatchReport with one outcome per file
        """
        report = BatchReport()

        if files is None:
            scanner = AssetScanner(self.game, quiet=not self.progress)
            jobs = self.create_jobs(scanner.iter_files(), report)
            report.scan_warnings.extend(scanner.warnings)
        else:
            jobs = self.create_jobs(files, report)

        if self.progress:
            for rejected in report.failures:
                self._print_failure(rejected)

        total = len(jobs)
        if total == 0:
            if self.progress:
                print("No assets to process", file=sys.stderr)
            return report

        if self.progress:
            print(f"Decrypting {total} assets using {self.workers} workers...", file=sys.stderr)

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(self.run_job, job) for job in jobs]

            completed = 0
            for future in as_completed(futures):
                outcome = future.result()
                report.record(outcome)
                completed += 1

                if self.progress and not outcome.ok:
                    self._print_failure(outcome)
                if self.progress and (completed % PROGRESS_EVERY == 0 or completed == total):
                    print(f"Progress: {completed}/{total} ({100 * completed // total}%)", file=sys.stderr)

        return report


def discover_key(
    game: GameRoot,
    explicit_key: str | None = None,
    chain: tuple[str, ...] = DEFAULT_CHAIN,
    verbose: bool = False,
) -> tuple[EncryptionKey, KeySource]:
    """Find the key of a game through the key source chain.

    Raises:
        KeyDiscoveryError: If no source yields a key, or one fails fatally
    """
    sources = KeySourceRegistry.create_chain(
        chain,
        explicit_key=explicit_key,
        options={"manifest": {"verbose": verbose}},
    )
    return resolve_key(game, sources, verbose=verbose)


def decrypt_game(
    path: Path,
    key: str | None = None,
    keyless: bool = False,
    workers: int | None = None,
    output_dir: Path | None = None,
    strict: bool = False,
    progress: bool = False,
) -> BatchReport:
    """Detect, find the key of, and decrypt a whole game.

    Args:
        path: Game directory
        key: Optional hex key overriding key discovery
        keyless: Skip key discovery and substitute known headers instead
        workers: Thread pool size
        output_dir: Optional directory for restored files
        strict: Treat magic mismatches as failures
        progress: Print progress to stderr

    Returns:
        BatchReport of the run

    Raises:
        GameRootError: If ``path`` is not a usable game directory
        KeyDiscoveryError: If no key can be found; no file is written then
    """
    game = GameRoot.detect(path)

    encryption_key = None
    if not keyless:
        encryption_key, _ = discover_key(game, explicit_key=key, verbose=progress)

    pipeline = DecryptionPipeline(
        game,
        encryption_key,
        workers=workers,
        output_dir=output_dir,
        strict=strict,
        progress=progress,
    )
    return pipeline.run()
