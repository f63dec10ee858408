import logging
import sys
from dataclasses import replace


def main() -> None:
    # Force UTF-8 for stdout on Windows (default cp1252 can't handle Unicode)
    if sys.platform == "win32" and hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")
    from .cli import parse_args
    from .config import ConfigError, load_settings, validate_settings
    from .graph import RebuildError
    from .ignore import get_ignore_specs
    from .logger import setup_logging
    from .report import build_report
    from .sources import CollectContext, collect_sources
    from .writer import report_to_string, write_string_to_file

    try:
        args = parse_args()
        setup_logging(args.verbosity)

        settings = load_settings(args.config_file)
        if args.workers is not None:
            settings = validate_settings(replace(settings, analysis=replace(settings.analysis, workers=args.workers)))

        base_dir = args.root if args.root.is_dir() else args.root.parent
        ctx = CollectContext(
            base_dir=base_dir,
            combined_spec=get_ignore_specs(base_dir, args.ignore_file, args.no_default_ignores, args.output_file),
            max_file_bytes=args.max_file_bytes,
            by_author=args.by_author,
        )
        collection = collect_sources(args.root, ctx)

        report = build_report(args.root, collection, settings, args.by_author, args.threshold, args.top)
        write_string_to_file(report_to_string(report, args.output_format), args.output_file, args.output_format)

    except (ConfigError, RebuildError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except BrokenPipeError:
        sys.stderr.close()
        sys.exit(141)
    except OSError as e:
        logging.debug(f"I/O failure: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
