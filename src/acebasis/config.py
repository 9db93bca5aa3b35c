"""
Manage basis configurations.

A basis configuration collects the parameters of ``utils.rpi_basis``.
Configurations are validated on construction and can be stored in
JSON files.

"""

import json
import math
import os
import shutil
import warnings
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

from .exceptions import ConfigurationError
from .staticdata import to_atomic_number

__author__ = "The acebasis developers"
__date__ = "2024-05-02"

DEFAULT = {
    "species": ["X"],
    "N": 3,
    "maxdeg": 8,
    "wL": 1.5,
    "r0": 2.5,
    "rcut": 5.0,
    "rin": None,
    "pcut": 2,
    "pin": 2,
    "maxn": None,
    "maxL": None,
}


@dataclass
class BasisConfig:
    """
    Parameters of an RPI basis.

    Parameters
    ----------
    species : list of str or int
        Chemical symbols or atomic numbers
    N : int
        Maximum correlation order
    maxdeg : float or dict
        Degree bound, or {order: bound}
    wL : float
        Weight of the angular momentum in the degree n + wL*l
    r0 : float
        Typical nearest-neighbour distance; sets the default inner radius
    rcut : float
        Outer cutoff radius
    rin : float, optional
        Inner radius of the radial basis (default: 0.5 * r0)
    pcut : int
        Power of the outer envelope of the radial basis
    pin : int
        Power of the inner envelope of the radial basis
    maxn : int, optional
        Number of radial functions (default: derived from maxdeg)
    maxL : int, optional
        Largest angular momentum (default: derived from maxdeg)
    """

    species: List[Union[str, int]] = field(
        default_factory=lambda: list(DEFAULT["species"]))
    N: int = DEFAULT["N"]
    maxdeg: Any = DEFAULT["maxdeg"]
    wL: float = DEFAULT["wL"]
    r0: float = DEFAULT["r0"]
    rcut: float = DEFAULT["rcut"]
    rin: Optional[float] = DEFAULT["rin"]
    pcut: int = DEFAULT["pcut"]
    pin: int = DEFAULT["pin"]
    maxn: Optional[int] = DEFAULT["maxn"]
    maxL: Optional[int] = DEFAULT["maxL"]

    def __post_init__(self):
        """Validate the parameters."""
        if isinstance(self.species, (str, int)):
            self.species = [self.species]
        self.species = list(self.species)
        if len(self.species) == 0:
            raise ConfigurationError("The species list is empty.")
        for s in self.species:
            to_atomic_number(s)

        if isinstance(self.N, bool) or not isinstance(self.N, int) \
                or self.N < 0:
            raise ConfigurationError(
                f"N must be a non-negative integer, got {self.N!r}")

        if isinstance(self.maxdeg, dict):
            # JSON object keys are strings
            self.maxdeg = {int(k): v for k, v in self.maxdeg.items()}
            bounds = list(self.maxdeg.values())
        else:
            bounds = [self.maxdeg]
        for b in bounds:
            if isinstance(b, bool) or not isinstance(b, (int, float)) \
                    or not math.isfinite(b) or b < 0:
                raise ConfigurationError(
                    f"maxdeg must be finite and non-negative, got {b!r}")

        if not self.wL > 0:
            raise ConfigurationError(f"wL must be positive, got {self.wL}")
        if self.rin is None:
            self.rin = 0.5 * self.r0
        if not 0.0 <= self.rin < self.rcut:
            raise ConfigurationError(
                f"Radii must satisfy 0 <= rin < rcut, got rin={self.rin}, "
                f"rcut={self.rcut}")
        if self.pcut < 0 or self.pin < 0:
            raise ConfigurationError(
                f"Envelope powers must be non-negative, got "
                f"pcut={self.pcut}, pin={self.pin}")
        if self.maxn is not None and self.maxn < 1:
            raise ConfigurationError(
                f"maxn must be at least 1, got {self.maxn}")
        if self.maxL is not None and self.maxL < 0:
            raise ConfigurationError(
                f"maxL must be non-negative, got {self.maxL}")

    @classmethod
    def from_dict(cls, settings: Dict[str, Any]) -> "BasisConfig":
        """
        Create a configuration from a dict; unknown keys are ignored with
        a warning.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in settings.items():
            if key not in known:
                warnings.warn(f"Unknown basis setting '{key}' ignored.")
                continue
            kwargs[key] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_basis_config(config_file) -> BasisConfig:
    """
    Read a basis description from a JSON file.

    Args:
      config_file (str): path to the JSON file; parameters missing from
        the file take their default values

    Returns:
      validated BasisConfig

    """
    with open(config_file) as fp:
        settings = json.load(fp)
    if not isinstance(settings, dict):
        raise ConfigurationError(
            "Malformed basis file: {}".format(config_file))
    return BasisConfig.from_dict(settings)


def save_basis_config(cfg: BasisConfig, config_file):
    """
    Write a basis description to a JSON file.  An existing file is
    kept as a backup with the extension '.bak'.

    Args:
      cfg (BasisConfig): the configuration
      config_file (str): path to the JSON file

    """
    if os.path.exists(config_file):
        shutil.copy2(config_file, config_file + ".bak")
    with open(config_file, "w") as fp:
        json.dump(cfg.to_dict(), fp, indent=2)
    return config_file
