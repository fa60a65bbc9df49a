"""
CLI entry point for itemshift.

Usage:
    itemshift convert <file|->           Convert an item table (default: compact)
    itemshift parse <file|->             Parse a file and show an item summary
    itemshift formats                    List output formats
    itemshift build <name>               Build a single item from a name
    itemshift config                     Show or create the configuration file
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from . import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_USAGE_ERROR = 2
EXIT_VALIDATION_MISMATCH = 3


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )


def _load_config(args):
    from .config import get_config
    return get_config(Path(args.config) if args.config else None)


def _read_input(source: str, encodings) -> str:
    """Read a source file, or stdin for `-`."""
    from .parser import read_source

    if source == "-":
        return sys.stdin.read()
    return read_source(source, encodings)


def _dialects(name: str, craft_constructor: str):
    from .parser import default_dialects, get_dialect

    if name == "auto":
        return default_dialects(craft_constructor)
    return [get_dialect(name, craft_constructor)]


def _write_output(text: str, output) -> None:
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(text)
    else:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")


def cmd_convert(args):
    """Convert an item table to another format."""
    from .config import ConfigError
    from .convert import convert_text
    from .formats import UnknownFormatError, get_format
    from .parser import ConversionError

    try:
        config = _load_config(args)
        format_id = args.format or config.default_format
        fmt = get_format(format_id)
        text = _read_input(args.file, config.encoding_fallbacks)
        result = convert_text(
            text,
            fmt.id,
            dialects=_dialects(args.dialect, config.craft_constructor),
            chunk_size=config.chunk_size,
            pause_every=config.pause_every,
            namespace=args.namespace or config.namespace,
        )
    except (UnknownFormatError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except ConversionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    try:
        _write_output(result.text, args.output)
    except OSError as e:
        print(f"Error: could not write {args.output}: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    print(f"Converted {result.item_count} items ({result.dialect} dialect) "
          f"to {fmt.title}: {result.size_label}", file=sys.stderr)
    if args.output:
        print(f"Wrote: {args.output}", file=sys.stderr)
    print(result.validation.summary(), file=sys.stderr)

    if args.strict and not result.validation.matches:
        return EXIT_VALIDATION_MISMATCH
    return EXIT_OK


def cmd_parse(args):
    """Parse a file and show an item summary."""
    from .config import ConfigError
    from .parser import ConversionError, parse_items

    try:
        config = _load_config(args)
        text = _read_input(args.file, config.encoding_fallbacks)
        result = parse_items(text, _dialects(args.dialect, config.craft_constructor))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except ConversionError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    print(f"Parsed: {args.file}")
    print(f"Dialect: {result.dialect}")
    print(f"Items: {len(result)}")

    if args.dump:
        records = [item.to_dict() for item in result.items]
        print(yaml.safe_dump(records, sort_keys=False, allow_unicode=True), end="")
        return EXIT_OK

    limit = 20 if args.all else 5
    for item in result.items[:limit]:
        extras = f" (+{len(item.extra)} extra)" if item.extra else ""
        print(f"  - {item.key}{extras}")
    if len(result) > limit:
        print(f"  ... and {len(result) - limit} more")

    return EXIT_OK


def cmd_formats(args):
    """List output formats."""
    from .formats import list_formats

    for fmt in list_formats():
        print(f"{fmt.id:<10} .{fmt.extension:<5} {fmt.title}: {fmt.description}")
    return EXIT_OK


def cmd_build(args):
    """Build a single item and print it in the chosen format."""
    from .builder import build_item, suggest_item
    from .convert import convert_items
    from .formats import UnknownFormatError, get_format

    suggestion = suggest_item(args.name)
    item_type = args.type or suggestion.type
    weight = args.weight if args.weight is not None else suggestion.weight

    try:
        config = _load_config(args)
        fmt = get_format(args.format or config.default_format)
        item = build_item(
            args.name,
            label=args.label or suggestion.label,
            image=args.image or suggestion.image,
            weight=weight,
            item_type=item_type,
            unique=args.unique,
            useable=args.useable,
            description=args.description,
        )
    except (UnknownFormatError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    text = convert_items([item], fmt, namespace=config.namespace)
    _write_output(text, args.output)
    if args.output:
        print(f"Wrote: {args.output}", file=sys.stderr)
    return EXIT_OK


def cmd_config(args):
    """Show the effective configuration, or write a default config file."""
    from .config import ConfigError, write_default_config

    if args.init is not None:
        path = write_default_config(Path(args.init) if args.init else None)
        print(f"Wrote: {path}")
        return EXIT_OK

    try:
        config = _load_config(args)
        print(yaml.safe_dump(config.to_dict(), sort_keys=False), end="")
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    return EXIT_OK


def main(argv=None):
    """Main CLI entry point."""
    from .parser import DIALECT_NAMES

    parser = argparse.ArgumentParser(
        description="Convert Lua item tables between formats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    itemshift convert items.lua -f json -o items.json
    cat pasted.lua | itemshift convert - -f minimal
    itemshift parse shared/items.lua --all
    itemshift build combat_pistol --useable -f original
"""
    )
    parser.add_argument('--version', action='version', version=f'itemshift {__version__}')
    parser.add_argument('--config', help='Path to a YAML config file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('-q', '--quiet', action='store_true', help='Warnings only')

    subparsers = parser.add_subparsers(dest='command', help='Commands')
    dialect_choices = ("auto",) + DIALECT_NAMES

    # convert
    convert_p = subparsers.add_parser('convert', help='Convert an item table')
    convert_p.add_argument('file', help="Source file, or '-' for stdin")
    convert_p.add_argument('-f', '--format', help='Output format (see `itemshift formats`)')
    convert_p.add_argument('-o', '--output', help='Output file (default: stdout)')
    convert_p.add_argument('--dialect', choices=dialect_choices, default='auto',
                           help='Source dialect (default: try all in order)')
    convert_p.add_argument('--namespace', help='Table name for Lua headers')
    convert_p.add_argument('--strict', action='store_true',
                           help='Exit with status 3 when item counts do not match')
    convert_p.set_defaults(func=cmd_convert)

    # parse
    parse_p = subparsers.add_parser('parse', help='Parse an item table')
    parse_p.add_argument('file', help="Source file, or '-' for stdin")
    parse_p.add_argument('--dialect', choices=dialect_choices, default='auto')
    parse_p.add_argument('-a', '--all', action='store_true', help='List up to 20 item keys')
    parse_p.add_argument('--dump', action='store_true', help='Print every parsed record as YAML')
    parse_p.set_defaults(func=cmd_parse)

    # formats
    formats_p = subparsers.add_parser('formats', help='List output formats')
    formats_p.set_defaults(func=cmd_formats)

    # build
    build_p = subparsers.add_parser('build', help='Build a single item')
    build_p.add_argument('name', help='Item name, e.g. combat_pistol')
    build_p.add_argument('--label')
    build_p.add_argument('--weight')
    build_p.add_argument('--type')
    build_p.add_argument('--image')
    build_p.add_argument('--unique', action='store_true')
    build_p.add_argument('--useable', action='store_true')
    build_p.add_argument('--description')
    build_p.add_argument('-f', '--format', help='Output format')
    build_p.add_argument('-o', '--output', help='Output file (default: stdout)')
    build_p.set_defaults(func=cmd_build)

    # config
    config_p = subparsers.add_parser('config', help='Show or create configuration')
    config_p.add_argument('--init', nargs='?', const='', metavar='PATH',
                          help='Write a default config file (default: ~/.itemshift/config.yaml)')
    config_p.set_defaults(func=cmd_config)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    setup_logging(args.verbose, args.quiet)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
