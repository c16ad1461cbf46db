"""CLI interface for batch job processing."""
import sys
import json
import signal
import asyncio
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from audiobatch.domain.exceptions import DomainException
from audiobatch.domain.models import BatchResult, LocalFileStatus, ProgressSnapshot
from audiobatch.infrastructure.config import ConfigLoader, BatchConfig
from audiobatch.application.service import run_batch
from audiobatch.shared.logging import setup_logger, get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='audiobatch',
        description="Process a folder of audio files through a remote job workflow"
    )
    parser.add_argument('input', nargs='?', type=Path, help='Input folder (mp3/wav/m4a files)')
    parser.add_argument('output', nargs='?', type=Path, help='Output folder (default: ./output)')
    parser.add_argument('--config', type=Path, help='Config YAML file')
    parser.add_argument('--workflow', '-w', help='Workflow id')
    parser.add_argument('--api-key', help='API key (prefer AUDIOBATCH_API_KEY)')
    parser.add_argument('--api-base', help='API base URL')
    parser.add_argument('--concurrency', '-c', type=int, help='Files processed at once (default: 5)')
    parser.add_argument('--poll-interval', type=float, help='Seconds between job status checks')
    parser.add_argument('--poll-timeout', type=float, help='Give up on a job after this many seconds')
    parser.add_argument('--abort-pending', action='store_true', default=None,
                        help='Mark files not yet started as ABORTED when cancelled')
    parser.add_argument('--log-file', type=Path, help='Also write logs to this file')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--debug', action='store_true', help='Print a more detailed output in the console')
    verbosity.add_argument('--silent', action='store_true', help='Only print warnings and errors')
    return parser


def load_config(args: argparse.Namespace) -> BatchConfig:
    """Resolve config from file, environment and CLI arguments."""
    overrides = {
        'input_folder': args.input,
        'output_folder': args.output,
        'workflow_id': args.workflow,
        'api_key': args.api_key,
        'api_base': args.api_base,
        'concurrency': args.concurrency,
        'poll_interval': args.poll_interval,
        'poll_timeout': args.poll_timeout,
        'abort_pending_on_cancel': args.abort_pending,
        'log_file': args.log_file,
    }
    return ConfigLoader(config_path=args.config).load(overrides=overrides)


def install_cancel_handlers(cancel_signal: asyncio.Event, logger: logging.Logger) -> None:
    """Set ``cancel_signal`` on SIGINT/SIGTERM so the batch drains gracefully."""
    loop = asyncio.get_running_loop()

    def _request_cancel(signame: str) -> None:
        if not cancel_signal.is_set():
            logger.warning(f"{signame} received, finishing files in progress (no new files will start)")
            cancel_signal.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_cancel, sig.name)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers
            logger.debug(f"Cannot install handler for {sig.name}")


def print_summary(result: BatchResult, logger: logging.Logger) -> None:
    logger.info("=" * 60)
    for status, count in result.snapshot.counts().items():
        if count:
            logger.info(f"{status}: {count}")
    for source, manifest in zip(result.files, result.manifests):
        logger.info(f"{source.name}:")
        for name, path in manifest.items():
            logger.info(f"   {name} -> {path}")
    for path in result.failed:
        logger.error(f"Failed: {path.name}")
    elapsed = result.metrics.get('total_elapsed')
    if elapsed is not None:
        logger.info(f"Total time: {elapsed:.1f}s")
    logger.info("=" * 60)


async def _run(config: BatchConfig, logger: logging.Logger) -> BatchResult:
    cancel_signal = asyncio.Event()
    install_cancel_handlers(cancel_signal, logger)

    def on_progress(file_path: Path, status: LocalFileStatus, snapshot: ProgressSnapshot) -> None:
        done = snapshot.total - len(snapshot.files(LocalFileStatus.PENDING)) - len(snapshot.files(LocalFileStatus.PROCESSING))
        logger.info(f"[{done}/{snapshot.total}] {file_path.name}: {status.value}")

    return await run_batch(
        config,
        cancel_signal=cancel_signal,
        on_progress=on_progress,
        on_log=logger.info,
        on_error=logger.error,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.debug:
        log_level = logging.DEBUG
    elif args.silent:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO
    setup_logger('audiobatch', level=log_level, log_file=args.log_file)

    logger = get_logger(__name__)
    try:
        config = load_config(args)
        config.require_credentials()

        if args.debug:
            logger.debug("Showing a more detailed log")
            logger.debug(json.dumps(config.masked(), indent=2, default=str))

        logger.info("=" * 60)
        logger.info(f"Input: {config.input_folder}")
        logger.info(f"Output: {config.output_folder}")
        logger.info(f"Workflow: {config.workflow_id}")
        logger.info(f"Concurrency: {config.concurrency}")
        logger.info("=" * 60)

        result = asyncio.run(_run(config, logger))
        print_summary(result, logger)

        statuses = result.snapshot
        if statuses.total and len(statuses.files(LocalFileStatus.SUCCEEDED)) == statuses.total:
            return 0
        if not statuses.total:
            logger.warning("No supported files found")
            return 0
        return 1

    except DomainException as e:
        logger.error(f"Batch error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    except Exception as e:
        logger.exception(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
