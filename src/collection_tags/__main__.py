import sys

from collection_tags.cli import main

sys.exit(main())
