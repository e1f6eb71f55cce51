import argparse
import json
import sys
import zipfile

from loguru import logger

from .apk import MANIFEST_ENTRY, read_apk_entry, read_file
from .decoder import AXMLDecoder
from .errors import EntryNotFound, ResParserError
from .log import setup_logging
from .manifest import ManifestInfo
from .printer import AXMLPrinter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="axmldecode",
        description="Decode Android binary XML and resources.arsc files",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--apk", help="Decode an entry of this apk")
    source.add_argument("--xml", help="Decode a binary XML file")
    source.add_argument("--res", help="Decode a resources.arsc file and print a summary")
    parser.add_argument("--entry", default=MANIFEST_ENTRY,
                        help="Entry of the apk to decode (default: %(default)s)")
    parser.add_argument("-o", "--output", help="Write to this file instead of stdout")
    parser.add_argument("--summary", action="store_true",
                        help="Print the manifest summary as JSON instead of the XML")
    parser.add_argument("--compact", action="store_true", help="Do not pretty print")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser


def table_summary(raw_buff: bytes) -> dict:
    """
    Decode a resources.arsc file and collect what was found in it.
    """
    decoder = AXMLDecoder(raw_buff)
    decoder.parse()
    packages = list(decoder.packages)
    for table in decoder.resource_tables:
        packages.extend(table.packages)
    return {
        "tables": [
            {"packageCount": t.package_count, "strings": len(t.strings)}
            for t in decoder.resource_tables
        ],
        "globalStrings": [s for t in decoder.resource_tables for s in t.strings],
        "packages": [
            {
                "id": p.id,
                "name": p.name,
                "types": p.type_names,
                "keys": p.key_names,
            }
            for p in packages
        ],
    }


def run(args: argparse.Namespace) -> bytes:
    if args.res:
        summary = table_summary(read_file(args.res))
        return json.dumps(summary, indent=None if args.compact else 2).encode("utf-8")

    if args.apk:
        raw = read_apk_entry(args.apk, args.entry)
    else:
        raw = read_file(args.xml)

    printer = AXMLPrinter(raw)
    if args.summary:
        info = ManifestInfo.from_xml(printer.get_xml_obj())
        return json.dumps(info.as_dict(), indent=None if args.compact else 2).encode("utf-8")
    return printer.get_xml(pretty=not args.compact)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING")

    try:
        output = run(args)
    except (ResParserError, EntryNotFound, ValueError, OSError, zipfile.BadZipFile) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    if args.output:
        with open(args.output, "wb") as fp:
            fp.write(output)
    else:
        sys.stdout.buffer.write(output)
        if not output.endswith(b"\n"):
            sys.stdout.buffer.write(b"\n")
        sys.stdout.flush()
    return 0
