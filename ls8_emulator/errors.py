"""Exception base shared by the LS-8 emulator modules."""


class LS8Error(Exception):
    """Base for errors raised by the emulator, loader and decoder."""
    pass
