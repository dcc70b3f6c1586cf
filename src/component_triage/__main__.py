import sys

from src.component_triage.cli import main


sys.exit(main())
