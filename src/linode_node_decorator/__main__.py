import sys

from linode_node_decorator.cli.entrypoint import main

sys.exit(main())
