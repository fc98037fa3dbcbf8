#! /usr/bin/env python3

# © 2025 Unit Circle Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# Convert between Intel HEX, binary and C include.
#
# Example usage:
# ./hex2c.py app.hex > app.h
# ./hex2c.py --binary --filler 0xff -o app.bin app.hex
# ./hex2c.py --hex --wrap 32 -o app2.hex app.hex
# ./hex2c.py --from-binary --hex -o app.hex app.bin
# ./hex2c.py --info app.hex

import argparse
import io
import logging
import sys
from collections import namedtuple

import carray
import ihex
import image

log = logging.getLogger("hex2c")

FORMAT_NAMES = {"hex": "Intel HEX", "binary": "binary"}

Options = namedtuple(
    "Options", ["fmt_in", "fmt_out", "output", "wrap", "padding", "filler", "strict", "name"]
)


def byte_value(string):
    # takes a number (decimal, 0x.. hex or 0o.. octal) in the range 0..255
    # otherwise raises an argument error
    try:
        v = int(string, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number({string})")
    if v < 0 or v > 255:
        raise argparse.ArgumentTypeError(f"{string} not in range 0..255")
    return v


def detect_format(data):
    try:
        text = data.decode("ascii")
    except UnicodeDecodeError:
        return "binary"
    for line in text.splitlines():
        if len(line.strip()) > 0:
            return "hex" if line.startswith(":") else "binary"
    return "hex"


def read_image(data, opts):
    fmt = opts.fmt_in or detect_format(data)
    if fmt == "binary":
        return fmt, image.load_binary(io.BytesIO(data))

    filler = ihex.DEFAULT_FILLER if opts.filler is None else opts.filler
    text = data.decode("ascii", errors="replace")
    # Lines end at \n only, as fgets() does
    f = io.StringIO(text, newline="\n")
    img, diagnostics = ihex.load(f, opts.strict, filler)
    for d in diagnostics:
        log.warning(f"Warning (line {d.lineno}): {d.message}")
    return fmt, img


def info(img, fmt):
    lines = [f"format: {FORMAT_NAMES[fmt]}", f"size: {img.size} bytes"]
    if img.size > 0:
        lines.append(f"range: 0x{img.base:04X}-0x{img.end - 1:04X}")
    if img.entry != 0:
        lines.append(f"entry: 0x{img.entry:04X}")
    return "\n".join(lines) + "\n"


def write_image(f, img, fmt, opts):
    if opts.fmt_out == "binary":
        f.write(image.encode_binary(img, opts.filler))
    elif opts.fmt_out == "hex":
        ihex.dump(f, img, opts.wrap)
    elif opts.fmt_out == "c":
        carray.dump(f, img, opts.wrap, opts.padding, opts.name)
    else:
        f.write(info(img, fmt))


def open_output(opts):
    binary = opts.fmt_out == "binary"
    if opts.output is None or opts.output == "-":
        return sys.stdout.buffer if binary else sys.stdout, False
    if binary:
        return open(opts.output, "wb"), True
    return open(opts.output, "wt", newline=""), True


def convert(file, opts):
    try:
        with open(file, "rb") as f:
            data = f.read()
    except OSError:
        log.error(f"error: unable to read {file}")
        return 1

    fmt, img = read_image(data, opts)
    log.debug(f"{file}: {FORMAT_NAMES[fmt]} {img!r}")

    # Empty image is never written
    if img.size == 0 and opts.fmt_out != "info":
        log.debug("nothing to write")
        return 0

    try:
        f, close = open_output(opts)
        try:
            write_image(f, img, fmt, opts)
        finally:
            if close:
                f.close()
            else:
                f.flush()
    except OSError:
        log.error(f"error: writing to {opts.output or '-'}")
        return 1
    return 0


def parser():
    parser = argparse.ArgumentParser(
        "hex2c",
        description="Convert between Intel HEX, binary and C include format.",
        epilog="Intel HEX format is 8-bit only (64KB max).",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-B",
        "--from-binary",
        dest="fmt_in",
        action="store_const",
        const="binary",
        help="FILE has no specific format",
    )
    group.add_argument(
        "-H",
        "--from-hex",
        dest="fmt_in",
        action="store_const",
        const="hex",
        help="FILE has Intel HEX format (default is to detect)",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-b",
        "--binary",
        dest="fmt_out",
        action="store_const",
        const="binary",
        help="binary dump output",
    )
    group.add_argument(
        "-c",
        "--c",
        dest="fmt_out",
        action="store_const",
        const="c",
        help="C include output [default]",
    )
    group.add_argument(
        "-x",
        "--hex",
        dest="fmt_out",
        action="store_const",
        const="hex",
        help="Intel HEX format output",
    )
    group.add_argument(
        "-i",
        "--info",
        dest="fmt_out",
        action="store_const",
        const="info",
        help="print format, size and address range of FILE",
    )
    parser.set_defaults(fmt_out="c")
    parser.add_argument("-o", "--output", help="set output file name, - is stdout")
    parser.add_argument(
        "-p", "--padding", type=byte_value, default=0, help="extra space on line"
    )
    parser.add_argument(
        "-w", "--wrap", type=byte_value, default=0, help="maximum output bytes per line"
    )
    parser.add_argument(
        "-f",
        "--filler",
        type=byte_value,
        help="value of unwritten bytes, also pads binary output from address 0",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="reject unknown record types and ignore extended records",
    )
    parser.add_argument(
        "-n", "--name", default=carray.DEFAULT_NAME, help="C array name"
    )
    parser.add_argument("-s", "--silent", action="store_true", help="suppress messages")
    parser.add_argument("--debug", action="store_true", help="debug output")
    parser.add_argument("file", help="input file")
    return parser


def main(argv=None):
    args = parser().parse_args(argv)

    if args.debug:
        level = logging.DEBUG
    elif args.silent:
        level = logging.CRITICAL
    else:
        level = logging.WARNING
    logging.basicConfig(stream=sys.stderr, format="%(message)s")
    logging.getLogger().setLevel(level)

    opts = Options(
        args.fmt_in,
        args.fmt_out,
        args.output,
        args.wrap,
        args.padding,
        args.filler,
        args.strict,
        args.name,
    )
    return convert(args.file, opts)


if __name__ == "__main__":
    sys.exit(main())
