import sys
from pathlib import Path


# The packages (`common`, `connectors`, `adapters`, `pipelines`, `scripts`) sit directly
# under src/backend and are imported by top-level name, without an editable install.
_BACKEND = str(Path(__file__).resolve().parent.parent)
if _BACKEND not in sys.path:
    sys.path.insert(0, _BACKEND)
