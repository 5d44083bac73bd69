import logging
import math
from dataclasses import dataclass
from typing import Optional

from pymatlaw.errors import InvalidParameterError, NotFinalizedError

logger = logging.getLogger(__name__)

# saturation thresholds of the regularized branches
PC_LOW_SE = 0.01
PC_HIGH_SE = 0.99


def _check_finite(name, value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value}")
    return value


@dataclass(frozen=True)
class VEParams:
    """
    Vertical equilibrium extension of the Brooks-Corey parameters.

    Attributes:
        height (float): Height H of the upscaled column [m].
    """

    height: float

    def __post_init__(self):
        height = _check_finite("height", self.height)
        if height <= 0.0:
            raise InvalidParameterError(
                f"VE column height must be positive, got {height}"
            )
        object.__setattr__(self, "height", height)


@dataclass(frozen=True)
class BrooksCoreyParams:
    """
    Validated, immutable coefficients of the Brooks-Corey laws of one
    material region.

    Attributes:
        pce (float): Entry pressure [Pa].
        labda (float): Pore size distribution (shape) exponent.
        swr (float): Residual wetting phase saturation.
        snr (float): Residual non-wetting phase saturation.
        krw0 (float): Wetting phase relative permeability end point.
        krn0 (float): Non-wetting phase relative permeability end point.
        pc_low_se (float): Effective saturation below which the capillary
            pressure is regularized.
        pc_high_se (float): Effective saturation above which the capillary
            pressure is regularized.
        ve (VEParams): Vertical equilibrium extension, None for fine-scale laws.
    """

    pce: float
    labda: float
    swr: float = 0.0
    snr: float = 0.0
    krw0: float = 1.0
    krn0: float = 1.0
    pc_low_se: float = PC_LOW_SE
    pc_high_se: float = PC_HIGH_SE
    ve: Optional[VEParams] = None

    def __post_init__(self):
        for name in (
            "pce",
            "labda",
            "swr",
            "snr",
            "krw0",
            "krn0",
            "pc_low_se",
            "pc_high_se",
        ):
            object.__setattr__(self, name, _check_finite(name, getattr(self, name)))
        if self.pce <= 0.0:
            raise InvalidParameterError(f"entry pressure must be positive, got {self.pce}")
        if self.labda <= 0.0:
            raise InvalidParameterError(f"labda must be positive, got {self.labda}")
        for name in ("swr", "snr"):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise InvalidParameterError(f"{name} must lie in [0, 1), got {value}")
        if self.swr + self.snr >= 1.0:
            raise InvalidParameterError(
                f"swr + snr must be smaller than 1, got {self.swr} + {self.snr}"
            )
        for name in ("krw0", "krn0"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise InvalidParameterError(f"{name} must lie in (0, 1], got {value}")
        check_thresholds(self.pc_low_se, self.pc_high_se)
        if self.ve is not None and not isinstance(self.ve, VEParams):
            raise InvalidParameterError(f"ve must be a VEParams record, got {self.ve!r}")

    @classmethod
    def create(cls, pce, labda, height=None, **kwargs):
        """
        Creates a parameter record; a height turns on the VE extension.
        """
        ve = None if height is None else VEParams(height=height)
        return cls(pce=pce, labda=labda, ve=ve, **kwargs)

    @property
    def mobile_range(self) -> float:
        """Width 1 - swr - snr of the mobile saturation range."""
        return 1.0 - self.swr - self.snr

    @property
    def height(self) -> float:
        if self.ve is None:
            raise InvalidParameterError("parameter set carries no VE extension")
        return self.ve.height


def check_thresholds(pc_low_se, pc_high_se):
    if not 0.0 < pc_low_se < 1.0 or not 0.0 < pc_high_se < 1.0:
        raise InvalidParameterError(
            f"regularization thresholds must lie in (0, 1), got {pc_low_se}, {pc_high_se}"
        )
    if pc_low_se >= pc_high_se:
        raise InvalidParameterError(
            f"pc_low_se ({pc_low_se}) must be smaller than pc_high_se ({pc_high_se})"
        )


class BrooksCoreyParamsBuilder:
    """
    Collects the coefficients of a material region and turns them into a
    BrooksCoreyParams record.

    The setters may be called in any order. finalize() validates the values
    and must be called before any of the accessors. Calling a setter after
    finalize() invalidates the builder until finalize() is called again;
    records returned earlier are not affected.

    Args:
        vertical_equilibrium (bool, optional): Build parameters for the VE
            law. A positive column height must then be set. Default is False.
    """

    def __init__(self, vertical_equilibrium=False):
        self.vertical_equilibrium = vertical_equilibrium
        self._values = dict(
            pce=None,
            labda=None,
            swr=0.0,
            snr=0.0,
            krw0=1.0,
            krn0=1.0,
            pc_low_se=PC_LOW_SE,
            pc_high_se=PC_HIGH_SE,
        )
        self._height = 0.0
        self._params = None

    def _set(self, name, value):
        if self._params is not None:
            logger.debug("%s changed after finalize(), parameters must be finalized again", name)
            self._params = None
        self._values[name] = value

    def set_entry_pressure(self, value):
        self._set("pce", value)

    def set_labda(self, value):
        self._set("labda", value)

    def set_swr(self, value):
        self._set("swr", value)

    def set_snr(self, value):
        self._set("snr", value)

    def set_krw_end_point(self, value):
        self._set("krw0", value)

    def set_krn_end_point(self, value):
        self._set("krn0", value)

    def set_pc_low_se(self, value):
        self._set("pc_low_se", value)

    def set_pc_high_se(self, value):
        self._set("pc_high_se", value)

    def set_height(self, value):
        if self._params is not None:
            logger.debug("height changed after finalize(), parameters must be finalized again")
            self._params = None
        self._height = value

    def finalize(self) -> BrooksCoreyParams:
        for name in ("pce", "labda"):
            if self._values[name] is None:
                raise InvalidParameterError(f"{name} has not been set")
        ve = None
        if self.vertical_equilibrium:
            ve = VEParams(height=self._height)
        elif self._height:
            logger.warning(
                "column height %s ignored for a non-VE parameter set", self._height
            )
        self._params = BrooksCoreyParams(ve=ve, **self._values)
        logger.debug("finalized %s", self._params)
        return self._params

    @property
    def finalized(self) -> bool:
        return self._params is not None

    def params(self) -> BrooksCoreyParams:
        if self._params is None:
            raise NotFinalizedError("finalize() must be called before reading parameters")
        return self._params

    def entry_pressure(self):
        return self.params().pce

    def labda(self):
        return self.params().labda

    def swr(self):
        return self.params().swr

    def snr(self):
        return self.params().snr

    def krw_end_point(self):
        return self.params().krw0

    def krn_end_point(self):
        return self.params().krn0

    def pc_low_se(self):
        return self.params().pc_low_se

    def pc_high_se(self):
        return self.params().pc_high_se

    def height(self):
        return self.params().height
