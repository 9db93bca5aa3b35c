"""
Provides static data.

atomic_symbols[Z]  Chemical symbol of species with atomic number Z
atomic_number[S]   Atomic number of species S

The placeholder symbol 'X' has atomic number 0 and denotes a generic,
unnamed species.

"""

from .exceptions import ConfigurationError

__author__ = "The acebasis developers"
__date__ = "2024-05-02"

atomic_symbols = (
    "X",
    "H", "He",
    "Li", "Be", "B", "C", "N", "O", "F", "Ne",
    "Na", "Mg", "Al", "Si", "P", "S", "Cl", "Ar",
    "K", "Ca", "Sc", "Ti", "V", "Cr", "Mn", "Fe", "Co", "Ni", "Cu", "Zn",
    "Ga", "Ge", "As", "Se", "Br", "Kr",
    "Rb", "Sr", "Y", "Zr", "Nb", "Mo", "Tc", "Ru", "Rh", "Pd", "Ag", "Cd",
    "In", "Sn", "Sb", "Te", "I", "Xe",
    "Cs", "Ba", "La", "Ce", "Pr", "Nd", "Pm", "Sm", "Eu", "Gd", "Tb", "Dy",
    "Ho", "Er", "Tm", "Yb", "Lu", "Hf", "Ta", "W", "Re", "Os", "Ir", "Pt",
    "Au", "Hg", "Tl", "Pb", "Bi", "Po", "At", "Rn",
    "Fr", "Ra", "Ac", "Th", "Pa", "U", "Np", "Pu", "Am", "Cm", "Bk", "Cf",
    "Es", "Fm", "Md", "No", "Lr", "Rf", "Db", "Sg", "Bh", "Hs", "Mt", "Ds",
    "Rg", "Cn", "Nh", "Fl", "Mc", "Lv", "Ts", "Og")

atomic_number = {}
for i, sym in enumerate(atomic_symbols):
    atomic_number[sym] = i


def to_atomic_number(species):
    """
    Convert a chemical symbol or an atomic number to an atomic number.

    Arguments:
      species (str or int)   chemical symbol ('Si') or atomic number (14)

    Returns:
      The atomic number as int.

    """
    if isinstance(species, str):
        if species not in atomic_number:
            raise ConfigurationError(
                "Unknown chemical symbol: {}".format(species))
        return atomic_number[species]
    z = int(species)
    if z != species or z < 0 or z >= len(atomic_symbols):
        raise ConfigurationError("Invalid atomic number: {}".format(species))
    return z
