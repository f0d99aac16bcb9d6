# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from typing import Optional


@dataclass
class ReflectConfig:
    # Byte order of bytes-like input. A byte-swapped magic number in the
    # header overrides this for the rest of the module.
    byteorder: str = "little"

    # Maximum nesting of the type graph walked when resolving sizes and
    # shader types. Deeper graphs raise TypeRecursionError.
    max_type_depth: int = 64

    # Logging.
    #
    # If not None, Reflection sets the level of the "spvreflect" logger to
    # this value. If None preserve the existing level.
    log_level: Optional[int] = None
