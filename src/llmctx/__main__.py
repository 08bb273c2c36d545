from llmctx.cli import main

raise SystemExit(main())
