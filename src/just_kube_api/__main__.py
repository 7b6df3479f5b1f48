import sys

from just_kube_api.cli import main

sys.exit(main())
