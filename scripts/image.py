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

# In memory binary image shared by the hex, binary and C listing codecs.


class Image(object):
    """Contiguous memory contents starting at ``base``.

    ``entry`` is the start address from the input, 0 when there is none.
    """

    def __init__(self, data=b"", base=0, entry=0):
        self.data = bytes(data)
        self.base = base
        self.entry = entry

    @property
    def size(self):
        return len(self.data)

    @property
    def end(self):
        return self.base + len(self.data)

    def __len__(self):
        return len(self.data)

    def __eq__(self, other):
        if not isinstance(other, Image):
            return NotImplemented
        return (self.data, self.base, self.entry) == (
            other.data,
            other.base,
            other.entry,
        )

    def __repr__(self):
        return f"Image(size={self.size}, base=0x{self.base:04X}, entry=0x{self.entry:X})"


def load_binary(f):
    return Image(f.read())


def encode_binary(image, filler=None):
    if image.size == 0:
        return b""
    if filler is None:
        return image.data
    # Pad so that output offset 0 is image address 0
    return bytes([filler]) * image.base + image.data
