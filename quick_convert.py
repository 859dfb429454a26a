#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Quick Convert CLI - repair and convert model-generated chapter files

Usage:
    python quick_convert.py sanitize chapter.tex -o chapter.clean.tex
    python quick_convert.py repair-json outline.json
    python quick_convert.py to-xhtml chapter.clean.tex --title "Chapter 1" --lang pl -o chapter-1.xhtml

INPUT may be '-' to read from stdin; without -o the result goes to stdout.
"""

import sys
import json
import argparse
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

# Load environment variables
load_dotenv()

from config.logging_config import get_logger
from config.settings import settings
from core.epub.xhtml_transpiler import TranspilerConfig, XhtmlTranspiler
from core.latex.sanitizer import LatexSanitizer, SanitizerConfig
from core.repair.structured_output import StructuredOutputError, load_structured_output

logger = get_logger(__name__)


def read_input(path: str) -> Optional[str]:
    """Read INPUT ('-' for stdin); None when the file is missing"""
    if path == '-':
        return sys.stdin.read()
    input_file = Path(path)
    if not input_file.exists():
        logger.error(f"Input file not found: {input_file}")
        return None
    return input_file.read_text(encoding='utf-8')


def write_output(text: str, path: Optional[str]) -> None:
    """Write to -o path, or stdout"""
    if not path:
        sys.stdout.write(text)
        if not text.endswith('\n'):
            sys.stdout.write('\n')
        return
    output_file = Path(path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text, encoding='utf-8')
    logger.info(f"Wrote {output_file} ({len(text)} chars)")


def cmd_sanitize(args):
    """Sanitize generated chapter LaTeX"""
    latex = read_input(args.input)
    if latex is None:
        return 1

    config = SanitizerConfig.from_settings(language=args.lang)
    if args.remove_ai_phrases:
        config.remove_ai_phrases = True

    result = LatexSanitizer(config).sanitize_with_report(latex)
    write_output(result.text, args.output)

    if args.report:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
    return 0


def cmd_repair_json(args):
    """Repair truncated JSON and pretty-print it"""
    text = read_input(args.input)
    if text is None:
        return 1

    try:
        value = load_structured_output(text, truncated=args.truncated, context=args.context)
    except StructuredOutputError as e:
        logger.error(f"Could not recover JSON: {e}")
        return 1

    write_output(json.dumps(value, indent=2, ensure_ascii=False), args.output)
    return 0


def cmd_to_xhtml(args):
    """Convert sanitized chapter LaTeX to an XHTML body fragment"""
    latex = read_input(args.input)
    if latex is None:
        return 1

    config = TranspilerConfig.from_settings()
    if args.no_icons:
        config.callout_icons = False

    fragment = XhtmlTranspiler(config).transpile(latex, args.title, args.lang)
    write_output(fragment.body, args.output)
    logger.info(f"'{fragment.title}': {fragment.footnote_count} footnote(s)")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="BookForge markup tools: sanitize LaTeX, repair JSON, convert to XHTML",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Sanitize command
    sanitize_parser = subparsers.add_parser('sanitize', help='Repair generated chapter LaTeX')
    sanitize_parser.add_argument('input', help="Input .tex file ('-' for stdin)")
    sanitize_parser.add_argument('--output', '-o', help='Output file (default: stdout)')
    sanitize_parser.add_argument('--lang', default=None, help=f'Chapter language (default: {settings.default_language})')
    sanitize_parser.add_argument('--remove-ai-phrases', action='store_true', help='Strip stock model phrasing')
    sanitize_parser.add_argument('--report', action='store_true', help='Print a JSON repair report to stderr')

    # Repair JSON command
    json_parser = subparsers.add_parser('repair-json', help='Repair truncated JSON output')
    json_parser.add_argument('input', help="Input file ('-' for stdin)")
    json_parser.add_argument('--output', '-o', help='Output file (default: stdout)')
    json_parser.add_argument('--truncated', action='store_true', help='Generator hit its token limit')
    json_parser.add_argument('--context', default='structure', help='Label used in log messages')

    # To XHTML command
    xhtml_parser = subparsers.add_parser('to-xhtml', help='Convert chapter LaTeX to XHTML')
    xhtml_parser.add_argument('input', help="Input .tex file ('-' for stdin)")
    xhtml_parser.add_argument('--title', '-t', required=True, help='Chapter title')
    xhtml_parser.add_argument('--lang', default=None, help=f'Book language (default: {settings.default_language})')
    xhtml_parser.add_argument('--output', '-o', help='Output file (default: stdout)')
    xhtml_parser.add_argument('--no-icons', action='store_true', help='Omit callout box icons')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Route to command handlers
    commands = {
        'sanitize': cmd_sanitize,
        'repair-json': cmd_repair_json,
        'to-xhtml': cmd_to_xhtml,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
