import sys

from .cli.dedup import main

sys.exit(main())
