"""Block cipher modes an oracle can run in"""

from enum import Enum


class Mode(Enum):
    ECB = "ECB"
    CBC = "CBC"

    def __str__(self):
        return self.value
