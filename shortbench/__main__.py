import sys

from shortbench.cli import main

sys.exit(main())
