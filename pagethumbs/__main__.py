from pagethumbs.cli.main import main


raise SystemExit(main())
