import sys

from omz_setup.cli import main

sys.exit(main())
