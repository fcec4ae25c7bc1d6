"""ThriveSprite avatar studio.

Importing the package loads ``server/.env`` and then ``server/.env.local`` so
that :mod:`thrivesprite.config` sees local credentials when it is first read.
"""
from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv


_SERVER_DIR = Path(__file__).resolve().parent.parent
_ENV_FILES = (".env", ".env.local")

for _index, _name in enumerate(_ENV_FILES):
    # Later files override earlier ones.
    load_dotenv(_SERVER_DIR / _name, override=_index > 0)
