import sys

from kontrolleurs.cli import main

sys.exit(main())
