import sys

from asciifier.cli import main

sys.exit(main())
