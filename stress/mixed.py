"""Mixed create/redirect Locust profile.

Each iteration is a create with probability ``CREATE_RATIO`` (default 0.1) and a
redirect otherwise. Redirect targets come from ``CODES_FILE``, which must exist.

Run::

    CREATE_RATIO=0.2 VUS=100 locust -f stress/mixed.py --headless
"""

import logging

from shortbench.config import get_settings
from shortbench.enums import BenchType
from shortbench.runtime import setup_run

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")

MixedUser, MixedShape = setup_run(settings, BenchType.MIXED)
