# =============================================================================
# Emailesque Entry Point for `python -m emailesque`
# =============================================================================
# This module allows Emailesque to be run as a Python module:
#
#   python -m emailesque --to ... --subject ... --message ...
#
# This is equivalent to running the 'emailesque' command after installation.
# =============================================================================

import sys

from emailesque.cli import main

if __name__ == "__main__":
    sys.exit(main())
