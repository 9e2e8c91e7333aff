import sys

from clvadd.cli import main

sys.exit(main())
