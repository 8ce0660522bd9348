from ecargraph.cli import main

raise SystemExit(main())
