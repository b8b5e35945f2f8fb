"""Command-line interface for voc-tfrecord."""
from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Optional

from . import config, settings_manager
from .errors import ConfigError, CorruptRecordError, PrepareError
from .formats.readers.tfrecord_reader import TfrecordReader
from .prepare_worker import prepare


def _path_type(path_str: str) -> pathlib.Path:
    return pathlib.Path(path_str).expanduser().resolve()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert annotated image datasets into TensorFlow inputs")
    parser.add_argument("--settings", type=_path_type, required=False, help="Path to a JSON settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    subparsers = parser.add_subparsers(dest="command", required=True)

    voc = subparsers.add_parser("pascal-voc", help="Use a PASCAL-VOC dataset")
    voc_commands = voc.add_subparsers(dest="voc_command", required=True)

    # prepare
    prep = voc_commands.add_parser(
        "prepare",
        help="Prepare a PASCAL-VOC dataset for tensorflow: "
             "generates the label map and two tfrecord files, a training set and a test set",
    )
    prep.add_argument("-i", "--input", type=_path_type, required=True,
                      help="Input directory, where your dataset is. Will be searched recursively")
    prep.add_argument("-o", "--output", type=_path_type, required=True,
                      help="Output directory, where the TensorFlow files will be written")
    prep.add_argument("--retain", default=None,
                      help=f"Percentage of data placed in the test set, e.g. 20%% or 20/100 "
                           f"(default: {config.DEFAULT_RETAIN})")
    prep.set_defaults(func=_run_prepare)

    # verify
    verify = voc_commands.add_parser("verify", help="Check the frames and checksums of generated tfrecord files")
    verify.add_argument("records", type=_path_type, nargs="+", help="tfrecord files to check")
    verify.set_defaults(func=_run_verify)

    return parser


def _run_prepare(args, settings) -> int:
    retain = args.retain if args.retain is not None else settings["retain"]
    try:
        test_ratio = config.parse_retain_ratio(retain)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        report = prepare(str(args.input), str(args.output), test_ratio)
    except PrepareError as e:
        logging.error(f"{e} ({e.__cause__})")
        return 1

    for line in report.summary_lines():
        print(line)
    return 0


def _run_verify(args, settings) -> int:
    failed = 0
    for path in args.records:
        try:
            count = len(TfrecordReader(str(path)).read())
        except (OSError, CorruptRecordError) as e:
            print(f"{path}: INVALID - {e}")
            failed += 1
            continue
        print(f"{path}: OK, {count} record(s)")
    return 1 if failed else 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(format='%(asctime)s - %(levelname)s - %(message)s')
    settings = settings_manager.load_settings(str(args.settings) if args.settings else None)

    level = logging.DEBUG if args.verbose else getattr(logging, str(settings["log_level"]).upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.getLogger().setLevel(level)
    return args.func(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
