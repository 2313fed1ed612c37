import sys

from job_scraper.cli import main

sys.exit(main())
