import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to sys.path
sys.path.append(str(Path(__file__).resolve().parent.parent))

# Keep test history out of the real database; must run before core.config is imported
os.environ.setdefault("DB_PATH", str(Path(tempfile.mkdtemp()) / "isochrone_test.db"))
os.environ["GEMINI_API_KEY"] = ""

ORIGIN_LAT = -6.2088
ORIGIN_LNG = 106.8456


def make_grid_elements(rows=6, cols=6, step=0.0005, lat0=ORIGIN_LAT, lng0=ORIGIN_LNG):
    """Overpass-style elements for a rows x cols street grid starting at (lat0, lng0)."""
    elements = []
    ids = {}
    for r in range(rows):
        for c in range(cols):
            node_id = 1000 + r * cols + c
            ids[(r, c)] = node_id
            elements.append({"type": "node", "id": node_id, "lat": lat0 + r * step, "lon": lng0 + c * step})
    way_id = 1
    for r in range(rows):
        elements.append({"type": "way", "id": way_id, "nodes": [ids[(r, c)] for c in range(cols)]})
        way_id += 1
    for c in range(cols):
        elements.append({"type": "way", "id": way_id, "nodes": [ids[(r, c)] for r in range(rows)]})
        way_id += 1
    return elements


@pytest.fixture
def grid_elements():
    return make_grid_elements()
