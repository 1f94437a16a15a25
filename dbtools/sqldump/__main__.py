"""Allow ``python -m dbtools.sqldump``."""

from .tools.dump_cli import main

main()
