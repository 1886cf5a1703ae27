import logging

import numpy as np

import deckprops

np.set_printoptions(linewidth=120)  # type: ignore

DECK = """
RUNSPEC
DIMENS
 6 4 3 /

GRID
PERMX
 72*100 /

-- lower permeability streak in the middle layer
BOX
 1 6  2 3  2 2 /
MULTIPLY
 PERMX 0.1 /
/
ENDBOX

COPY
 PERMX PERMY /
 PERMX PERMZ /
/
MULTIPLY
 PERMZ 0.1 /
/

EQUALS
 PORO 0.25 /
 PORO 0.12  1 6  2 3  2 2 /
/

-- net-to-gross from porosity
OPERATE
 NTG 1 6 1 4 1 3 MULTA PORO 2.0 0.3 /
/

REGIONS
EQUALS
 SATNUM 1 /
 SATNUM 2  1 6  2 3  2 2 /
/
"""


def main():
    logging.basicConfig(level=logging.INFO)
    properties = deckprops.load_properties(DECK)

    for name in properties.names():
        grid = properties[name].as_grid()
        print(f"{name} ({properties[name].kind.value})")
        # one k layer at a time, rows are j and columns are i
        for k in range(properties.extent.nz):
            print(f"  k={k + 1}")
            print(grid[:, :, k].T)
    return properties


if __name__ == "__main__":
    main()
