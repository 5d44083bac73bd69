import json
import logging

from pymatlaw.brooks_corey import BrooksCorey, MaterialLaw, RegularizedBrooksCorey
from pymatlaw.eff_to_abs import EffToAbsLaw
from pymatlaw.errors import InvalidParameterError
from pymatlaw.fluid_state import TWO_PHASE, TwoPhaseTraits
from pymatlaw.params import BrooksCoreyParams, BrooksCoreyParamsBuilder
from pymatlaw.vertical_equilibrium import GRAVITY, RegularizedBrooksCoreyVE

logger = logging.getLogger(__name__)

LAWS = ("raw", "regularized", "eff_to_abs", "ve")


def read_json(json_file):
    """
    Read a json file and return a dictionary. See sample json files in the examples folder.
    """
    try:
        with open(json_file) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        logger.error("Could not read json file %s", json_file)
        raise
    return data


def createBrooksCoreyParams(params_dict: dict, vertical_equilibrium=False) -> BrooksCoreyParams:
    """
    Creates a finalized BrooksCoreyParams object from a dictionary of Brooks-Corey properties.
    """
    builder = BrooksCoreyParamsBuilder(vertical_equilibrium=vertical_equilibrium)
    try:
        builder.set_entry_pressure(params_dict["pce"])
        builder.set_labda(params_dict["labda"])
    except KeyError as e:
        raise InvalidParameterError(f"missing Brooks-Corey parameter {e}") from e
    builder.set_swr(params_dict.get("swr", 0.0))
    builder.set_snr(params_dict.get("snr", 0.0))
    builder.set_krw_end_point(params_dict.get("krw0", 1.0))
    builder.set_krn_end_point(params_dict.get("krn0", 1.0))
    if "pc_low_se" in params_dict:
        builder.set_pc_low_se(params_dict["pc_low_se"])
    if "pc_high_se" in params_dict:
        builder.set_pc_high_se(params_dict["pc_high_se"])
    if vertical_equilibrium:
        builder.set_height(params_dict.get("height", 0.0))
    return builder.finalize()


def createTraits(law_dict: dict) -> TwoPhaseTraits:
    """
    Creates the phase indices of a region, e.g. {"wetting_phase": 1} for an oil-wet rock.
    """
    if "wetting_phase" not in law_dict:
        return TWO_PHASE
    w = law_dict["wetting_phase"]
    return TwoPhaseTraits(wetting_phase_idx=w, non_wetting_phase_idx=1 - w)


def createMaterialLaw(law_dict: dict) -> MaterialLaw:
    """
    Creates the material law of one region. law_dict["law"] selects the variant:
    raw, regularized, eff_to_abs (absolute saturations, regularized curves) or ve.
    """
    law = law_dict.get("law", "eff_to_abs")
    if law not in LAWS:
        raise InvalidParameterError(f"unknown material law {law!r}, expected one of {LAWS}")
    params = createBrooksCoreyParams(law_dict["brooks_corey"], vertical_equilibrium=(law == "ve"))
    traits = createTraits(law_dict)
    if law == "raw":
        return BrooksCorey(params, traits)
    if law == "regularized":
        return RegularizedBrooksCorey(params, traits)
    if law == "eff_to_abs":
        return EffToAbsLaw(RegularizedBrooksCorey(params, traits))
    return RegularizedBrooksCoreyVE(params, traits, gravity=law_dict.get("gravity", GRAVITY))


def read_material_laws(data: dict):
    """
    Create one material law per region using an input dictionary
    read from an input json file
    """
    laws = {}
    for region, law_dict in data["material_laws"].items():
        laws[region] = createMaterialLaw(law_dict)
        logger.debug("region %s uses %r", region, laws[region])
    return laws
