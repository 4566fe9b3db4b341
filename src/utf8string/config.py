"""Build-time options for native wide-character export.

Both values are fixed when the package is imported and never change for the
life of the process. The width follows the interpreter's `wchar_t`: 16 bits on
Windows, 32 bits on most POSIX platforms.
"""

from __future__ import annotations

import ctypes

WCHAR_SUPPORT = True

WCHAR_BITS = ctypes.sizeof(ctypes.c_wchar) * 8

if WCHAR_BITS not in (16, 32):
    raise ImportError(f"unsupported wchar_t width: {WCHAR_BITS} bits")
