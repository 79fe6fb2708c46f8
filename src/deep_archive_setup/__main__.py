"""Allow ``python -m deep_archive_setup``."""

from deep_archive_setup.cli import main

main()
