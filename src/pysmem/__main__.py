import sys

from pysmem.cli import main

sys.exit(main())
