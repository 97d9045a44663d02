from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Callable, Sequence

from .alignment import CLUSTER_POLICIES, plan, validate_inputs
from .applier import apply_corrections
from .errors import AlignError
from .models import AlignConfig
from .monitors import LiveStore
from .presentation import confirm_console, confirm_dialog, format_corrections, format_monitors
from .registry import RegistryStore
from .store import ConfigStore, select_latest

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 10
THRESHOLD_ENV = "MONITORALIGN_THRESHOLD"

EXIT_OK = 0
EXIT_APPLY_FAILED = 1
EXIT_INPUT_ERROR = 2

STORE_FACTORIES: dict[str, Callable[[], ConfigStore]] = {
    "registry": RegistryStore,
    "live": LiveStore,
}


def _threshold(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Threshold must be an integer, got {text!r}.") from exc
    if value < 0:
        raise argparse.ArgumentTypeError("Threshold must be zero or greater.")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monitoralign",
        description="Snap nearly-aligned monitor positions to a shared coordinate.",
    )
    parser.add_argument(
        "--threshold",
        type=_threshold,
        default=os.environ.get(THRESHOLD_ENV, str(DEFAULT_THRESHOLD)),
        help=f"Maximum pixel gap treated as misalignment (default: {DEFAULT_THRESHOLD}, env {THRESHOLD_ENV}).",
    )
    parser.add_argument("--source", choices=sorted(STORE_FACTORIES), default="registry")
    parser.add_argument("--policy", choices=sorted(CLUSTER_POLICIES), default="chained")
    parser.add_argument("--snapshot", dest="snapshot_id", help="Use this snapshot instead of the latest one.")
    parser.add_argument("-y", "--yes", dest="assume_yes", action="store_true", help="Apply without asking.")
    parser.add_argument("--dry-run", action="store_true", help="Show corrections and exit.")
    parser.add_argument("--gui", action="store_true", help="Confirm with a dialog instead of the console.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def parse_config(argv: Sequence[str] | None = None) -> AlignConfig:
    args = build_parser().parse_args(argv)
    return AlignConfig(
        threshold=args.threshold,
        source=args.source,
        policy=args.policy,
        snapshot_id=args.snapshot_id,
        assume_yes=args.assume_yes,
        dry_run=args.dry_run,
        gui=args.gui,
        verbose=args.verbose,
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def run(
    config: AlignConfig,
    store: ConfigStore,
    confirm: Callable[[str], bool] = confirm_console,
) -> int:
    try:
        if config.snapshot_id is not None:
            snapshot_id = config.snapshot_id
        else:
            snapshot = select_latest(store.list_snapshots())
            snapshot_id = snapshot.id
            logger.info("Using snapshot %s (timestamp %d)", snapshot.id, snapshot.timestamp)

        monitors = store.read_monitors(snapshot_id)
        print(f"Monitors in {snapshot_id}:")
        print(format_monitors(monitors))

        validate_inputs(monitors, config.threshold)
        corrections = plan(monitors, config.threshold, config.policy)
    except AlignError as exc:
        logger.error("%s", exc)
        return EXIT_INPUT_ERROR

    if not corrections:
        print(f"All monitors are already aligned within {config.threshold} px.")
        return EXIT_OK

    print("Proposed corrections:")
    print(format_corrections(corrections))

    if config.dry_run:
        return EXIT_OK

    if not config.assume_yes:
        approved = confirm_dialog(corrections) if config.gui else confirm("Apply these corrections? [y/N] ")
        if not approved:
            print("Aborted; nothing was changed.")
            return EXIT_OK

    report = apply_corrections(store, snapshot_id, corrections)
    print(f"Applied {len(report.applied)} of {len(corrections)} correction(s).")
    if not report.ok:
        for correction, message in report.failed:
            print(f"  FAILED {correction.monitor_id} {correction.axis.label}: {message}")
        return EXIT_APPLY_FAILED

    print("Sign out or reconnect the displays for the new layout to take effect.")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    config = parse_config(argv)
    configure_logging(config.verbose)
    try:
        store = STORE_FACTORIES[config.source]()
    except AlignError as exc:
        logger.error("%s", exc)
        return EXIT_INPUT_ERROR
    return run(config, store)
