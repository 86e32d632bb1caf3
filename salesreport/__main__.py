import sys

from salesreport.app import main

sys.exit(main())
