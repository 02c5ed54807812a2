"""
Physical constants and numerical controls for reskine.

Units: GeV (natural units c = 1).
"""

# Masses
PROTON_MASS = 0.93827
NEUTRON_MASS = 0.93957
NUCLEON_MASS = 0.5 * (PROTON_MASS + NEUTRON_MASS)
PION_MASS = 0.13957

ELECTRON_MASS = 0.000511
MUON_MASS = 0.105658
TAU_MASS = 1.77686

# PDG ID -> mass
LEPTON_MASSES = {
    11: ELECTRON_MASS,
    12: 0.0,
    13: MUON_MASS,
    14: 0.0,
    15: TAU_MASS,
    16: 0.0,
}

NUCLEON_MASSES = {
    2212: PROTON_MASS,
    2112: NEUTRON_MASS,
}

# Vector dipole mass (form factor scale)
MV = 0.840
MV2 = MV * MV

# Numerical controls
A_SMALL_NUM = 1e-6
MIN_Q2_LIMIT = 1e-4

# Max xsec estimates are coarser at low energy
LOW_ENERGY_THRESHOLD = 0.8
LOW_ENERGY_SAFETY_FACTOR = 2.0
