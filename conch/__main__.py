import sys

from conch.main import main

sys.exit(main())
