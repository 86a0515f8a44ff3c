from bid_load.cli import main

raise SystemExit(main())
