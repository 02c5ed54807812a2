"""
Histogram W and Q2 of events exported by monte_carlo.py --output.

    python plots/w_q2_distribution.py res.csv
"""
import sys

import numpy as np
import matplotlib.pyplot as plt


def load_kinematics(filename):
    data = np.genfromtxt(filename, delimiter=",", names=True)
    return data["W"], data["Q2"], data["weight"]


def main():
    filename = sys.argv[1] if len(sys.argv) > 1 else "res.csv"
    W, Q2, weight = load_kinematics(filename)

    fig, (ax_w, ax_q2) = plt.subplots(1, 2, figsize=(11, 4.5))

    ax_w.hist(W, bins=60, weights=weight, density=True, alpha=0.8, label="reskine")
    ax_w.set_xlabel(r"$W$ [GeV]")
    ax_w.set_ylabel("Normalized counts")
    ax_w.grid(alpha=0.3)
    ax_w.legend()

    ax_q2.hist(Q2, bins=60, weights=weight, density=True, alpha=0.8)
    ax_q2.set_xlabel(r"$Q^2$ [GeV$^2$]")
    ax_q2.set_yscale("log")
    ax_q2.grid(alpha=0.3)

    fig.suptitle("Selected resonance kinematics")
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
