from feednotes.cli import main

raise SystemExit(main())
