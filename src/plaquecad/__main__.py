import sys

from plaquecad.cli import main

sys.exit(main())
