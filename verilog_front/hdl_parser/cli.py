"""
Command-line front end: parse a Verilog file and print it back.

    verilog-front counter.v            # re-rendered Verilog
    verilog-front counter.v --json     # AST as JSON
    verilog-front counter.v --dump     # indented node tree
    verilog-front counter.v --list     # numbered source listing

A parse failure prints the located excerpt and exits with status 1.
"""

from __future__ import annotations
import argparse
import logging
import sys

from verilog_front.hdl_parser.parser import parse
from verilog_front.hdl_parser.diagnostics import ParseError, listing
from verilog_front.hdl_parser.codegen import VerilogCodeGenerator, UnsupportedConstruct
from verilog_front.hdl_parser.ast_json import ast_to_json
from verilog_front.hdl_parser.ast_visitor import ASTDumper, StatisticsVisitor

log = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verilog-front",
        description="Parse synchronous-logic Verilog and print it back.")
    parser.add_argument("source", type=argparse.FileType("r", encoding="utf-8"),
                        help="Verilog file to parse ('-' for stdin)")

    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="print the AST as JSON")
    output.add_argument("--dump", action="store_true", help="print the AST as an indented tree")
    output.add_argument("--stats", action="store_true", help="print node counts")
    output.add_argument("--list", action="store_true", help="print the numbered source listing")

    parser.add_argument("--strict", action="store_true",
                        help="fail instead of writing placeholders for unrenderable constructs")
    parser.add_argument("--indent", default="    ", help="indentation string (default: 4 spaces)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s: %(message)s")

    with args.source as f:
        source = f.read()

    if args.list:
        print(listing(source))
        return 0

    try:
        code = parse(source)
    except ParseError as e:
        log.error("%s: %s", args.source.name, e.message)
        print(e.excerpt(), file=sys.stderr)
        return 1

    if args.json:
        print(ast_to_json(code))
    elif args.dump:
        print(ASTDumper().dump(code))
    elif args.stats:
        stats = StatisticsVisitor()
        stats.visit(code)
        print(stats.report())
    else:
        generator = VerilogCodeGenerator(indent_str=args.indent, strict=args.strict)
        try:
            text = generator.generate(code)
        except UnsupportedConstruct as e:
            log.error("%s: %s", args.source.name, e)
            return 1
        sys.stdout.write(text)
        if generator.unsupported:
            log.warning("%d construct(s) rendered as placeholders", len(generator.unsupported))

    return 0


if __name__ == "__main__":
    sys.exit(main())
