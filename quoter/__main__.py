import sys

from quoter.cli import main

sys.exit(main())
