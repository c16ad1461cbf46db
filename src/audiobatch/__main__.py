import sys

from audiobatch.presentation.cli import main

sys.exit(main())
