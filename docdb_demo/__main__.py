from docdb_demo.main import main

raise SystemExit(main())
