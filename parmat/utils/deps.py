__all__ = [
    "numba_import",
    "numba_enabled",
]

import os
from importlib import util
from typing import Optional


def numba_import(message: Optional[str] = None) -> Optional[str]:
    """Check whether numba can be used.

    Parameters
    ----------
    message : :obj:`str`, optional
        Name of the functionality that requires numba, used to build
        the returned message.

    Returns
    -------
    numba_message : :obj:`str` or :obj:`None`
        ``None`` if numba is installed and not disabled through the
        ``NUMBA_PARMAT`` environment variable, otherwise a message
        explaining why ``message`` falls back to the numpy engine.

    """
    # NUMBA_PARMAT=0 disables numba even when installed
    if not int(os.getenv("NUMBA_PARMAT", 1)):
        return (
            f"numba disabled by NUMBA_PARMAT=0, falling back to the numpy "
            f"engine for {message}."
        )
    if util.find_spec("numba") is None:
        return (
            f"Numba not available. Run "
            f'"pip install numba" or "pip install parmat[numba]" '
            f"to use {message}; falling back to the numpy engine."
        )
    return None


numba_enabled = numba_import() is None
