# deck_estimator/__main__.py
# Package entrypoint so you can run:
#   python -m deck_estimator --help
# and it will delegate to the JSON runner.
#
# Examples:
#   python -m deck_estimator --job job.json
#   python -m deck_estimator --job job.json --mode pro --out out/ --cut_png cuts.png

from __future__ import annotations

from .run_json import main

if __name__ == "__main__":
    main()
