from frdownloader.update_data import main

raise SystemExit(main())
