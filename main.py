from rich.pretty import pprint

from minopt import *

parser = Parser([
    ("-w", "--watch [PATTERN]", "watch files matching PATTERN"),
    ("-l", "--lint", "lint sources before building"),
    ("-o", "--output [DIR]", "set output dir"),
    ("--tag [NAME*]", "add a tag (repeatable)"),
    ("-h", "--help", "show this help"),
], "Usage: main.py [options] FILE...", colorful=True)


if __name__ == '__main__':
    options = invoke(parser)
    if options.get("help"):
        parser.print_help()
    else:
        pprint(options)
