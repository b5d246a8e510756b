import sys

from izi.cli import main

sys.exit(main())
