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

# See https://en.wikipedia.org/wiki/Intel_HEX for approx. spec.
# NOTE: 8-bit (64KB) images only. Extended address records are recognized but
# never used to relocate data.
# NOTE: arm-none-eabi-objcopy use DOS line endings on all platforms so we copy.

import io
import logging
import string
import struct
from collections import namedtuple

from image import Image

log = logging.getLogger(__name__)

# Record types
TY_DATA = 0
TY_EOF = 1
TY_EXT_SEG = 2
TY_START_SEG = 3
TY_EXT_LIN = 4
TY_START_LIN = 5

MAX_ADDRESS = 0xFFFF
MIN_LINE = 1 + 2 * 5  # ':' + count(1) + address(2) + type(1) + checksum(1)
DEFAULT_WRAP = 16
DEFAULT_FILLER = 0xFF

EOF_RECORD = ":00000001FF"

# Diagnostic messages
W_INVALID = "invalid record"
W_EXTENDED = "extended record"
W_EXT_IGNORED = "extended address ignored"
W_UNKNOWN = "unknown record type"
W_NO_EOF = "no EOF record"

HEXDIGITS = frozenset(string.hexdigits)

Record = namedtuple("Record", ["count", "addr", "ty", "data"])
Diagnostic = namedtuple("Diagnostic", ["lineno", "message"])


class InvalidFormat(ValueError):
    pass


def checksum(payload):
    return (256 - (sum(payload) % 256)) % 256


def parse_record(line, strict=False):
    if len(line) == 0 or line[0] != ":":
        raise InvalidFormat("missing :")
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]

    n = len(line)
    if n < MIN_LINE or n % 2 == 0:
        raise InvalidFormat("invalid length")
    if not HEXDIGITS.issuperset(line[1:]):
        raise InvalidFormat("invalid hex digit")

    payload = bytes.fromhex(line[1:])
    count, addr, ty = struct.unpack(">BHB", payload[:4])
    if n != MIN_LINE + 2 * count:
        raise InvalidFormat("count does not match length")
    if addr + count > MAX_ADDRESS + 1:
        raise InvalidFormat("record exceeds 64KB")
    if strict and ty > TY_START_LIN:
        raise InvalidFormat(f"unknown type {ty:02X}")
    if sum(payload) % 256 != 0:
        raise InvalidFormat("cs fail")

    return Record(count, addr, ty, payload[4:-1])


def enc_record(addr, ty, data):
    payload = struct.pack(">BHB", len(data), addr, ty) + data
    return ":" + (payload + bytes([checksum(payload)])).hex().upper()


class Decoder(object):
    """Assembles a 64KB image from a sequence of Intel HEX lines.

    Malformed lines are skipped and reported in ``diagnostics``; they never
    abort decoding. ``strict`` rejects unknown record types at parse time and
    ignores every extended address/start record, lenient mode picks up the
    entry point from start records.
    """

    def __init__(self, strict=False, filler=DEFAULT_FILLER):
        self.strict = strict
        self.filler = filler
        self.diagnostics = []
        self.entry = 0
        self.mem = None
        self.lo = MAX_ADDRESS + 1
        self.hi = 0

    def warn(self, lineno, message):
        self.diagnostics.append(Diagnostic(lineno, message))

    def write(self, addr, data):
        if len(data) == 0:
            return
        if self.mem is None:
            self.mem = bytearray([self.filler]) * (MAX_ADDRESS + 1)
        # parse_record() ensures that we never get past MAX_ADDRESS
        self.mem[addr : addr + len(data)] = data
        self.lo = min(self.lo, addr)
        self.hi = max(self.hi, addr + len(data))

    def extended(self, lineno, rec):
        if self.strict:
            self.warn(lineno, W_EXTENDED)
            return
        if rec.ty in (TY_EXT_SEG, TY_EXT_LIN):
            if rec.addr != 0 or rec.count != 2:
                self.warn(lineno, W_INVALID)
            elif struct.unpack(">H", rec.data)[0] != 0:
                self.warn(lineno, W_EXT_IGNORED)
        else:
            if rec.addr != 0 or rec.count != 4:
                self.warn(lineno, W_INVALID)
            elif rec.ty == TY_START_SEG:
                cs, ip = struct.unpack(">HH", rec.data)
                self.entry = cs * 16 + ip
            else:
                (self.entry,) = struct.unpack(">I", rec.data)

    def feed(self, lines):
        lineno = 0
        for lineno, line in enumerate(lines, 1):
            try:
                rec = parse_record(line, self.strict)
            except InvalidFormat as e:
                log.debug("line %d: %s", lineno, e)
                self.warn(lineno, W_INVALID)
                continue

            if rec.ty == TY_DATA:
                self.write(rec.addr, rec.data)
            elif rec.ty == TY_EOF:
                return
            elif rec.ty <= TY_START_LIN:
                self.extended(lineno, rec)
            else:
                self.warn(lineno, W_UNKNOWN)

        self.warn(lineno + 1, W_NO_EOF)

    def image(self):
        if self.hi == 0:
            return Image(entry=self.entry)
        return Image(bytes(self.mem[self.lo : self.hi]), self.lo, self.entry)


def decode(lines, strict=False, filler=DEFAULT_FILLER):
    dec = Decoder(strict, filler)
    dec.feed(lines)
    image = dec.image()
    log.debug(
        "decoded %d bytes at 0x%04X, %d warnings",
        image.size,
        image.base,
        len(dec.diagnostics),
    )
    return image, dec.diagnostics


def load(f, strict=False, filler=DEFAULT_FILLER):
    return decode(f, strict, filler)


def loads(s, strict=False, filler=DEFAULT_FILLER):
    f = io.StringIO(s)
    image, diagnostics = load(f, strict, filler)
    f.close()
    return image, diagnostics


def check_wrap(wrap, default):
    wrap = wrap or default
    if wrap < 1 or wrap > 255:
        raise ValueError(f"invalid wrap {wrap}")
    return wrap


def dump(f, image, wrap=0):
    wrap = check_wrap(wrap, DEFAULT_WRAP)
    # 64KB max
    end = min(image.base + image.size, MAX_ADDRESS + 1)
    for addr in range(image.base, end, wrap):
        n = min(wrap, end - addr)
        offset = addr - image.base
        d = image.data[offset : offset + n]
        print(enc_record(addr, TY_DATA, d), file=f, end="\r\n")

    ss = image.entry
    if ss >= 65536 * 16:
        print(enc_record(0, TY_START_LIN, struct.pack(">I", ss)), file=f, end="\r\n")
    elif ss != 0:
        cs = (ss // 65536) * 4096
        ip = ss - cs * 16
        print(
            enc_record(0, TY_START_SEG, struct.pack(">HH", cs, ip)), file=f, end="\r\n"
        )
    print(EOF_RECORD, file=f, end="\r\n")


def dumps(image, wrap=0):
    f = io.StringIO()
    dump(f, image, wrap)
    s = f.getvalue()
    f.close()
    return s


encode_hex = dumps
