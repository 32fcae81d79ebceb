import sys

from kai.main import main

sys.exit(main())
