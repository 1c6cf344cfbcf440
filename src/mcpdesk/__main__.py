# Allow `python -m mcpdesk`
import sys

from mcpdesk.cli import main

sys.exit(main())
