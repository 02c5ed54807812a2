from enum import Flag, auto

from .interaction import Interaction


class EventFlags(Flag):
    NONE = 0
    NO_AVAILABLE_PHASE_SPACE = auto()
    NO_VALID_KINEMATICS = auto()
    KINE_GEN_ERR = auto()


class EventRecord:
    """
    Per-event sink for the kinematics generator.

    Holds the interaction, its total cross section, the differential
    cross section at the selected kinematics and the event weight.
    """

    def __init__(self, interaction: Interaction, xsec: float = 0.0, weight: float = 1.0):
        self.interaction = interaction
        self.xsec = xsec
        self.diff_xsec = 0.0
        self.weight = weight
        self.flags = EventFlags.NONE

    def set_flag(self, flag: EventFlags) -> None:
        self.flags |= flag

    def has_flag(self, flag: EventFlags) -> bool:
        return bool(self.flags & flag)

    @property
    def failed(self) -> bool:
        return self.flags != EventFlags.NONE

    def __repr__(self) -> str:
        return (f"EventRecord({self.interaction.as_string()}, xsec={self.xsec:.4g}, "
                f"diff_xsec={self.diff_xsec:.4g}, weight={self.weight:.4g}, flags={self.flags})")
