__all__ = [
    "ParamError",
    "InputError",
    "GenotypingError",
    "MalformedAlignmentTag",
    "AlignmentFailure",
    "ContigNotFound",
    "ReferenceBoundsError",
]


# configuration errors - raised before any locus is processed

class ParamError(Exception):
    pass


class InputError(Exception):
    pass


# fatal errors - abort the whole run

class GenotypingError(Exception):
    pass


class MalformedAlignmentTag(GenotypingError):
    pass


class AlignmentFailure(GenotypingError):
    pass


# locus-scoped errors - the locus is skipped, the run continues

class ContigNotFound(Exception):
    def __init__(self, contig: str):
        self.contig = contig
        super().__init__(f"Contig {contig} not found in alignment file")


class ReferenceBoundsError(Exception):
    pass
