import sys

from file_commander.cli import main

sys.exit(main())
