"""Command line interface for translating strings.xml files."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from res_translator import __version__
from res_translator import language_codes as lc
from res_translator.backends import EngineType, create_backend
from res_translator.config import create_default_config, get_config_file, load_config
from res_translator.logger import get_logger
from res_translator.resources import entry as res
from res_translator.resources.document import ParseError, read_entries
from res_translator.translation.pipeline import TranslationBatchPipeline
from res_translator.translation.progress import TranslationProgress

logger = get_logger(__name__)


def _print_progress(progress: TranslationProgress) -> None:
    if progress.phase == "translating" and progress.total_batches:
        print(
            f"[{progress.fraction:5.0%}] {progress.current_language_name}: "
            f"batch {progress.current_batch}/{progress.total_batches} ({progress.batch_entries_count} entries)"
        )
    elif progress.phase == "retrying":
        print(f"        {progress.current_language_name}: retry {progress.retry_attempt}")
    elif progress.phase in ("completed", "failed"):
        print(f"[{progress.fraction:5.0%}] {progress.current_language_name}: {progress.phase}")


def cmd_translate(args) -> int:
    source_path = Path(args.strings_xml)
    if not source_path.is_file():
        print(f"Error: Input file '{source_path}' not found.", file=sys.stderr)
        return 1

    unknown = [code for code in args.languages if not lc.is_valid_language_code(code)]
    if unknown:
        print(f"Error: Unknown language code(s): {', '.join(unknown)}", file=sys.stderr)
        return 1

    config = load_config(args.config)
    if args.source:
        config.setdefault("translation", {})["source_language"] = args.source

    try:
        source_entries = read_entries(source_path)
        backend = create_backend(engine=args.engine, config=config, model_override=args.model)
        pipeline = TranslationBatchPipeline.from_config(backend, config)
        result = pipeline.run(
            source_entries,
            source_path,
            args.languages,
            override=args.override,
            progress_callback=None if args.quiet else _print_progress,
        )
    except (ParseError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled", file=sys.stderr)
        return 130

    for language, path in result["generated_files"].items():
        print(f"{language}: {path}")
    if result["error"]:
        print(result["error"], end="", file=sys.stderr)
    print(
        f"Translated {len(result['generated_files'])}/{len(args.languages)} languages "
        f"in {result['elapsed_time']:.1f}s"
    )
    return 0 if result["success"] else 1


def cmd_init_config(args) -> int:
    config_file = Path(args.config) if args.config else get_config_file()
    if config_file.exists() and not args.force:
        print(f"Config file already exists: {config_file} (use --force to overwrite)", file=sys.stderr)
        return 1
    path = create_default_config(config_file)
    print(f"Created {path}")
    return 0


def cmd_show(args) -> int:
    try:
        entries = read_entries(args.strings_xml)
    except (ParseError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for entry in entries:
        res.decode_xml_value(entry)
        marker = "" if entry.translatable else "  (not translatable)"
        if res.is_list(entry):
            print(f"{entry.key}[]{marker}")
            for item in entry.items:
                print(f"    {item!r}")
        else:
            print(f"{entry.key} = {entry.value!r}{marker}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="res-translator",
        description="Translate Android strings.xml to multiple languages",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    translate = subparsers.add_parser("translate", help="Translate a strings.xml file")
    translate.add_argument("strings_xml", help="Path to the source strings.xml (inside a res/ directory)")
    translate.add_argument("-l", "--languages", nargs="+", required=True, help="Target language codes (e.g. fr de zh-CN)")
    translate.add_argument(
        "--engine",
        choices=[engine.value for engine in EngineType],
        help="Translation engine (default: engine from the config file)",
    )
    translate.add_argument("--model", help="Model for chat engines (default: first configured model)")
    translate.add_argument("--source", help="Source language code (default: translation.source_language)")
    translate.add_argument("--override", action="store_true", help="Ignore existing translations in target files")
    translate.add_argument("--config", help="Path to config.json")
    translate.add_argument("-q", "--quiet", action="store_true", help="Do not print progress")
    translate.set_defaults(func=cmd_translate)

    init_config = subparsers.add_parser("init-config", help="Write the default config.json")
    init_config.add_argument("--config", help="Path of the config file to create")
    init_config.add_argument("--force", action="store_true", help="Overwrite an existing config file")
    init_config.set_defaults(func=cmd_init_config)

    show = subparsers.add_parser("show", help="Print the decoded entries of a strings.xml file")
    show.add_argument("strings_xml", help="Path to a strings.xml file")
    show.set_defaults(func=cmd_show)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger.debug(f"Running command: {args.command}")
    return args.func(args)
