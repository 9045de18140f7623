import sys

from signcad.cli import main

sys.exit(main())
