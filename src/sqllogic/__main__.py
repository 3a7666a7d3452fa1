import sys

from sqllogic.cli import main

sys.exit(main())
