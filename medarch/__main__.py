import sys

from medarch.archive import main

sys.exit(main())
