import sys

from hbs_xgettext.cli import main

sys.exit(main())
