import sys

from rdsexporter.cli import main

sys.exit(main())
