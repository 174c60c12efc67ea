"""Command line entry point: extract Handlebars messages into a POT file.

Usage:
    hbs-xgettext -o translations/messages.pot 'templates/**/*.hbs'
    hbs-xgettext -k 'i18n:1' -k 'pi18n:1c,2' -D app 'templates/**/*.hbs'
"""

import argparse
import json
import sys

from hbs_xgettext import create_extractor
from hbs_xgettext.errors import ExtractionError
from hbs_xgettext.services.keyword_spec import parse_keyword_option


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hbs-xgettext',
        description='Extract translatable strings from Handlebars templates into a POT file',
    )
    parser.add_argument('patterns', nargs='+', metavar='PATTERN',
                        help='Glob pattern selecting template files')
    parser.add_argument('-o', '--output',
                        help='Write the POT file here instead of stdout')
    parser.add_argument('-k', '--keyword', action='append', default=[], metavar='SPEC',
                        help='Additional keyword in xgettext syntax, e.g. "pgettext:1c,2"')
    parser.add_argument('--keywords-file', metavar='JSON',
                        help='JSON file replacing the default keyword specification')
    parser.add_argument('-D', '--directory',
                        help='Resolve patterns relative to this directory')
    parser.add_argument('--encoding', help='Encoding of the template files')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log progress to stderr')
    return parser


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    overrides = {}
    if args.verbose:
        overrides['LOG_LEVEL'] = 'DEBUG'
    if args.encoding:
        overrides['INPUT_ENCODING'] = args.encoding

    try:
        if args.keywords_file:
            with open(args.keywords_file, 'r', encoding='utf-8') as f:
                overrides['KEYWORDS'] = json.load(f)

        extractor = create_extractor(**overrides)
        if args.keyword:
            extra = dict(parse_keyword_option(option) for option in args.keyword)
            extractor.keyword_spec = extractor.keyword_spec.extend(extra)

        options = {'root_dir': args.directory} if args.directory else {}
        entries = extractor.extract_patterns(args.patterns, **options)
        pot = extractor.messages_to_pot(entries)
    except (ExtractionError, OSError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8', newline='') as f:
                f.write(pot)
        except OSError as e:
            print(f"✗ Cannot write {args.output}: {e}", file=sys.stderr)
            return 1
        print(f"✓ Wrote {len(entries)} messages to {args.output}")
    else:
        sys.stdout.write(pot)
    return 0


if __name__ == '__main__':
    sys.exit(main())
