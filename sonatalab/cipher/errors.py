"""Exception types raised by the SONATA cipher core.

Every error is also a ``ValueError`` so callers that only care about
"bad input" can keep catching the builtin.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations


class SonataError(Exception):
    """Base class for all cipher-core errors."""


class TableValidationError(SonataError, ValueError):
    """An S-box or P-box is not a bijection over its domain.

    Generation always yields a permutation, so seeing this means a table
    was built or edited by hand (or there is a bug).
    """


class ScheduleError(SonataError, ValueError):
    """Round count is not a positive integer."""


class BlockSizeError(SonataError, ValueError):
    """A block or IV does not have the fixed 8-byte size."""


class CiphertextFormatError(SonataError, ValueError):
    """Ciphertext length is not a positive multiple of the block size."""


class PaddingError(SonataError, ValueError):
    """Trailing pad-length byte is 0 or larger than the buffer."""
