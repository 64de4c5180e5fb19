# boundvol/errors.py


class BoundsError(Exception):
    """Base class for failures local to one entity's bounding volume."""

    pass


class MeshPreconditionError(BoundsError, ValueError):
    """
    The mesh cannot be bounded: wrong topology, missing or badly encoded
    position attribute, or no vertices. Points at a malformed asset.
    """

    pass


class StaleMeshError(BoundsError, LookupError):
    """An entity references a mesh handle the asset server does not know."""

    pass
