from abc import ABC, abstractmethod

from ..kinematics import KinePhaseSpace


class CrossSectionModel(ABC):
    """
    Base class for differential cross section models.

    Evaluates the differential cross section at the interaction's current
    kinematics. Implementations must be deterministic for fixed inputs
    (no RNG) and may return 0 outside the physical region.
    """

    name: str = "abstract"
    description: str = ""

    @abstractmethod
    def xsec(self, interaction, phase_space: KinePhaseSpace = KinePhaseSpace.W_Q2) -> float:
        """
        Return the differential cross section.

        Args:
            interaction: Interaction with W and Q2 set
            phase_space: parametrization of the returned density

        Returns:
            Differential cross section (arbitrary but consistent units)
        """
