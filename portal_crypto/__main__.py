"""Module entrypoint for the ``portal-crypto`` command line."""

from __future__ import annotations

import sys

from portal_crypto.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
