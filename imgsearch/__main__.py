from imgsearch.cli.main import main

raise SystemExit(main())
