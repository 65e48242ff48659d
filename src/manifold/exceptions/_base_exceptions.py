class ManifoldError(Exception):
    """
    Base class for every error raised by manifold.
    """

    pass
