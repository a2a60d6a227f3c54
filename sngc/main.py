"""CLI entry point for the SNG compiler."""
from __future__ import annotations
import sys
import argparse
import logging
import traceback
from pathlib import Path

from . import __version__
from .errors import CompileError, CodecError
from .options import CompileOptions, DEFAULT_MAX_TOKEN_LENGTH
from .codec import RecordingCodec
from .compiler import compile_source, compile_to_png

logger = logging.getLogger("sngc")

EXIT_COMPILE_ERROR = 1
EXIT_CODEC_ERROR = 2
EXIT_INTERNAL_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sngc",
        description="Compile editable PNG source (SNG) to PNG",
    )
    parser.add_argument("file", nargs="?", help="SNG source file (default: stdin)")
    parser.add_argument("-o", "--output", help="Output PNG (default: FILE with .png suffix, or stdout)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Trace tokens and chunks")
    parser.add_argument("--max-token-length", type=int, default=DEFAULT_MAX_TOKEN_LENGTH,
                        help="Longest token accepted (default: %(default)s)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Validate only and list the compiled chunks")
    parser.add_argument("--version", action="version", version=f"sngc {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.file:
        try:
            source = Path(args.file).read_text(encoding="latin-1")
        except OSError as e:
            print(f"sngc: cannot read {args.file}: {e.strerror}", file=sys.stderr)
            return EXIT_COMPILE_ERROR
        source_name = args.file
    else:
        # Sources are byte streams; latin-1 maps every byte to one character
        source = sys.stdin.buffer.read().decode("latin-1")
        source_name = "stdin"

    options = CompileOptions(source_name=source_name, max_token_length=args.max_token_length)
    output = args.output
    if output is None and args.file:
        output = str(Path(args.file).with_suffix(".png"))
    return run_file(source, options, output, dry_run=args.dry_run)


def run_file(source: str, options: CompileOptions, output: str | None,
             dry_run: bool = False) -> int:
    """Compile one source. The only place compile errors are reported."""
    try:
        if dry_run:
            result = compile_source(source, RecordingCodec(), options)
            for record in result.chunks:
                print(f"{record.line}: {type(record).__name__}")
            return 0
        data = compile_to_png(source, options)
    except CodecError as e:
        print(e.diagnostic(options.source_name), file=sys.stderr)
        return EXIT_CODEC_ERROR
    except CompileError as e:
        print(e.diagnostic(options.source_name), file=sys.stderr)
        return EXIT_COMPILE_ERROR
    except Exception as e:
        print(f"sngc: internal error: {e}", file=sys.stderr)
        traceback.print_exc()
        return EXIT_INTERNAL_ERROR

    # Only a complete compile produces output
    if output is None:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        Path(output).write_bytes(data)
        logger.info("wrote %d bytes to %s", len(data), output)
    return 0


def main_entry():
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
