# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

import logging
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from . import spirv_constants as spv
from .errors import MalformedModuleError
from .ids import Header

logger = logging.getLogger(__name__)

Words = NDArray[np.uint32]
ModuleData = Union[bytes, bytearray, memoryview, Sequence[int], Words]


def load_words(data: ModuleData, byteorder: str = "little") -> Words:
    """Interpret module data as an array of 32-bit words.

    Bytes-like data is read in the declared byte order. Anything else is
    taken to be a sequence of word values that are already decoded.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        if byteorder not in ("little", "big"):
            raise ValueError(f"Unknown byte order: {byteorder}")
        if len(data) % 4 != 0:
            raise MalformedModuleError(f"Module size {len(data)} is not a multiple of 4 bytes")
        dtype = np.dtype("<u4") if byteorder == "little" else np.dtype(">u4")
        return np.frombuffer(data, dtype).astype(np.uint32)
    return np.asarray(data, dtype=np.uint32)


def read_header(words: Words) -> Tuple[Header, Words]:
    """Parse the 5 word preamble.

    Returns the header and the word array in the module's logical byte order:
    a byte-swapped magic number means every word, header included, was read
    in the opposite order and is swapped back here.
    """
    if len(words) < spv.HeaderWordCount:
        raise MalformedModuleError(f"Module too short for header ({len(words)} words)")

    magic = int(words[0])
    if magic == spv.MagicNumberSwapped:
        logger.debug("Byte-swapped magic number, flipping byte order")
        words = words.byteswap()
        magic = int(words[0])
    elif magic != spv.MagicNumber:
        raise MalformedModuleError(f"Invalid magic number 0x{magic:08x}")

    header = Header(
        magic=magic,
        version=int(words[1]),
        generator=int(words[2]),
        bound=int(words[3]),
        schema=int(words[4]),
    )
    logger.debug(
        "Header: version %d.%d, generator 0x%08x, bound %d",
        header.version_tuple[0],
        header.version_tuple[1],
        header.generator,
        header.bound,
    )
    return header, words
