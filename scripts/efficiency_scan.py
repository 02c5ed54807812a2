"""Compare importance-sampled and uniform selection across probe energies."""
import numpy as np

from reskine import EventRecord, Interaction, KinematicsConfig, Resonance, ResonanceKinematicsGenerator
from reskine.event_generator import estimate_total_xsec
from reskine.xsec import ToyResonanceModel

model = ToyResonanceModel()
rng = np.random.default_rng(42)

for energy in (0.7, 1.0, 2.0, 5.0):
    for uniform in (False, True):
        config = KinematicsConfig(uniform_over_phase_space=uniform)
        gen = ResonanceKinematicsGenerator(model, config, rng=rng)
        ok = 0
        for _ in range(200):
            interaction = Interaction.resonance(14, energy, Resonance.P33_1232)
            xsec = estimate_total_xsec(model, interaction, gen.ranges) if uniform else 0.0
            if gen.process(EventRecord(interaction, xsec=xsec)).ok:
                ok += 1
        mode = "uniform" if uniform else "importance"
        print(f"E = {energy:4.1f} GeV  {mode:10s}  selected {ok}/200  efficiency {gen.controller.efficiency:.3f}")
