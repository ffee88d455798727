import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1].parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def car_rates():
    """Hourly / daily / weekly / monthly rates for the same vehicle type."""
    return [
        {"id": "r-hour", "vehicle_type": "Carro", "rate_type": "Hora/Fração", "value": 10, "courtesy_minutes": 10},
        {"id": "r-day", "vehicle_type": "Carro", "rate_type": "Diária", "value": 40},
        {"id": "r-week", "vehicle_type": "Carro", "rate_type": "Semanal", "value": 35},
        {"id": "r-month", "vehicle_type": "Carro", "rate_type": "Mensal", "value": 450},
    ]
