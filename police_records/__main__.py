"""Allow ``python -m police_records``."""

from police_records.main import main

main()
