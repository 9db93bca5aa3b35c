class ConfigurationError(Exception):
    """Invalid parameters or inconsistent inputs at construction time."""

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg


class DomainError(Exception):
    """Invalid per-call input to an evaluation routine."""

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg


class UnknownSpeciesError(DomainError):

    def __init__(self, species):
        super().__init__(
            "Species not supported by this basis: {}".format(species))
        self.species = species
