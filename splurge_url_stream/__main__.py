from splurge_url_stream.cli import main

raise SystemExit(main())
