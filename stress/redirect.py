"""Redirect-only Locust profile.

Resolves codes drawn uniformly from ``CODES_FILE`` without following redirects
and checks for a 302 with a Location header. Seed the corpus first::

    python -m shortbench seed --count 100000 --output codes.json
    CODES_FILE=codes.json locust -f stress/redirect.py --headless

A missing or malformed corpus aborts the run before any user spawns.
"""

import logging

from shortbench.config import get_settings
from shortbench.enums import BenchType
from shortbench.runtime import setup_run

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")

RedirectUser, RedirectShape = setup_run(settings, BenchType.REDIRECT)
