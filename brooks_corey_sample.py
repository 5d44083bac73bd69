import logging

import matplotlib.pyplot as plt
import numpy as np

import pymatlaw.IO as IO
from pymatlaw.fluid_state import SimpleFluidState

logging.basicConfig(level=logging.INFO)

# read the input file
data = IO.read_json("examples/sample.json")
laws = IO.read_material_laws(data)

# evaluate the sand region for a column of cells
sand = laws["sand"]
sw = np.linspace(0.2, 0.9, 8)
fs = SimpleFluidState(sw=sw)
pc = sand.capillary_pressures(sand.new_values(sw.size), fs)
kr = sand.relative_permeabilities(sand.new_values(sw.size), fs)
print("sw  ", sw)
print("pc  ", pc[1])
print("krw ", kr[0])
print("krn ", kr[1])

# VE region: the CO2 plume has reached Smax = 0.6 and retreated to S = 0.5
ve = laws["aquifer_ve"]
fs_ve = SimpleFluidState(sw=0.5, rho_w=1000.0, rho_n=700.0, mu_w=1.0, smax=0.6)
print("h    ", ve.interface_height(0.5, 0.6))
print("hmax ", ve.max_interface_height(0.5, 0.6))
print("pc   ", ve.capillary_pressures(ve.new_values(), fs_ve))
print("kr   ", ve.relative_permeabilities(ve.new_values(), fs_ve))

for law in laws.values():
    law.visualize()
plt.show()
