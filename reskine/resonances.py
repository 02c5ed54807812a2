"""
Baryon resonance table.

Masses and nominal widths in GeV.
"""
from enum import Enum
from typing import Optional


class Resonance(Enum):
    P33_1232 = (1.232, 0.117)
    P11_1440 = (1.440, 0.350)
    D13_1520 = (1.515, 0.115)
    S11_1535 = (1.535, 0.150)
    P33_1600 = (1.600, 0.320)
    S31_1620 = (1.630, 0.140)
    S11_1650 = (1.655, 0.140)
    D15_1675 = (1.675, 0.150)
    F15_1680 = (1.685, 0.130)
    D33_1700 = (1.700, 0.300)
    P11_1710 = (1.710, 0.100)
    D13_1700 = (1.700, 0.150)
    P13_1720 = (1.720, 0.250)
    F35_1905 = (1.880, 0.330)
    P31_1910 = (1.910, 0.280)
    P33_1920 = (1.920, 0.260)
    F37_1950 = (1.930, 0.285)

    @property
    def mass(self) -> float:
        return self.value[0]

    @property
    def width(self) -> float:
        return self.value[1]


def resonance_from_name(name: Optional[str]) -> Optional[Resonance]:
    """
    Resolve a resonance by name, e.g. 'P33_1232' or 'P33(1232)'.
    Returns None for None, '' or 'unknown'.
    """
    if not name or name.lower() == "unknown":
        return None
    key = name.strip().upper().replace("(", "_").replace(")", "")
    try:
        return Resonance[key]
    except KeyError:
        raise ValueError(f"❌ Unknown resonance '{name}'") from None
