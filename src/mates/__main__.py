import sys

from mates.cli import main

sys.exit(main())
