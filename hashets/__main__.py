import sys

from hashets.cli import main

sys.exit(main())
