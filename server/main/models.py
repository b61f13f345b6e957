from __future__ import annotations

from ._models import *  # noqa: F401,F403
