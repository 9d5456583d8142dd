"""Create-only Locust profile.

Every iteration posts a unique URL to ``/api/v1/urls`` and checks for a 201 with
a short code. No corpus is needed.

Run::

    locust -f stress/create.py --headless
"""

import logging

from shortbench.config import get_settings
from shortbench.enums import BenchType
from shortbench.runtime import setup_run

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")

CreateUser, CreateShape = setup_run(settings, BenchType.CREATE)
