import sys

from src.map_viewer.cli import main

sys.exit(main())
