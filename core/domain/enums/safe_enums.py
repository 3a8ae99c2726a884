from __future__ import annotations

from enum import IntEnum


class Operation(IntEnum):
    """
    Safe `execTransaction` operation byte.

    - CALL: plain call from the Safe.
    - DELEGATE_CALL: target code runs in the Safe's storage context.
    """

    CALL = 0
    DELEGATE_CALL = 1
