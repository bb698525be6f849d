class DataError(Exception):
    """Data not in the expected format."""


class MalformedModel(DataError):
    """A serialized decision tree could not be decoded."""


class NoActiveReveal(Exception):
    """Cancel was requested but no reveal is running."""


class AmbiguousPathMatch(Exception):
    """A decision path step matched more than one split node.

    Never raised. Instances are collected on the alignment result so the first
    pre-order match can be audited.
    """

    def __init__(self, feature: str, threshold: float, rank: int, claimed_by: int):
        self.feature = feature
        self.threshold = threshold
        self.rank = rank
        self.claimed_by = claimed_by
        super().__init__(
            f"Step on '{feature}' at {threshold} also matches node {rank}; "
            f"already claimed by node {claimed_by}"
        )
