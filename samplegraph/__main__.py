import sys

from samplegraph.main import main

sys.exit(main())
