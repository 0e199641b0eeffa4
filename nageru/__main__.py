import sys

from .nageru import main

sys.exit(main())
