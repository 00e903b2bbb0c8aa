from __future__ import annotations

import sys
from pathlib import Path


# Make `import master_equation` work from a source checkout (src layout)
# without an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
