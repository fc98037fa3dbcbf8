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

# Renders an image as a C array for inclusion in firmware sources, e.g.
#
#   // Generated by hex2c
#   const uint8_t hex2c[3] = {
#       0x02, 0x33, 0x7a,                                  // 000
#   };

import io

DEFAULT_WRAP = 8
DEFAULT_PADDING = 4
DEFAULT_NAME = "hex2c"

ITEM_WIDTH = len("0x00, ")


def dump(f, image, wrap=0, padding=0, name=DEFAULT_NAME):
    wrap = wrap or DEFAULT_WRAP
    padding = padding or DEFAULT_PADDING
    if wrap < 1:
        raise ValueError(f"invalid wrap {wrap}")

    print("// Generated by hex2c", file=f)
    if image.base != 0:
        print(f"// base address 0x{image.base:04X}", file=f)
    if image.entry != 0:
        print(f"// entry point 0x{image.entry:04X}", file=f)
    print(f"const uint8_t {name}[{image.size}] = {{", file=f)

    for i in range(0, image.size, wrap):
        d = image.data[i : i + wrap]
        items = "".join(f"0x{b:02x}, " for b in d)
        # Short last line gets extra space so the offset comments line up
        gap = max((wrap - len(d)) * ITEM_WIDTH - 1 + padding, 1)
        print(" " * padding + items + " " * gap + f"// {i:03x}", file=f)

    print("};", file=f)


def dumps(image, wrap=0, padding=0, name=DEFAULT_NAME):
    f = io.StringIO()
    dump(f, image, wrap, padding, name)
    s = f.getvalue()
    f.close()
    return s


encode_listing = dumps
