"""Allow running as ``python -m rsmq_dashboard``."""

from rsmq_dashboard.cli import main

main()
