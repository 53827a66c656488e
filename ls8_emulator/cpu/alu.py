"""
LS-8 Emulator — ALU Operations

Every operation is a pure function over 8-bit register values. Results are
truncated to 8 bits (mod 256); overflow is never an error. The caller is
responsible for storing the result into the destination register.

CMP is the exception to "returns a byte result": it returns the LS-8 flag
bits (L, G, E) describing how the operands compare.
"""

MASK8 = 0xFF

# CMP flag bits
FL_L = 0b100  # a < b
FL_G = 0b010  # a > b
FL_E = 0b001  # a == b


def mul8(a: int, b: int) -> int:
    """Multiply, unsigned 8-bit wraparound."""
    return (a * b) & MASK8


def add8(a: int, b: int) -> int:
    return (a + b) & MASK8


def sub8(a: int, b: int) -> int:
    """Subtract; a borrow wraps (0 - 1 = 0xFF)."""
    return (a - b) & MASK8


def inc8(a: int, b: int = 0) -> int:
    return (a + 1) & MASK8


def dec8(a: int, b: int = 0) -> int:
    return (a - 1) & MASK8


def cmp8(a: int, b: int) -> int:
    """Compare a with b, return FL_L / FL_G / FL_E."""
    if a < b:
        return FL_L
    if a > b:
        return FL_G
    return FL_E


# Operation tag -> implementation
OPERATIONS = {
    'MUL': mul8,
    'ADD': add8,
    'SUB': sub8,
    'INC': inc8,
    'DEC': dec8,
    'CMP': cmp8,
}


def alu(op: str, a: int, b: int = 0) -> int:
    """Run ALU operation `op` on two register values.

    Raises ValueError for an unknown operation tag.
    """
    try:
        fn = OPERATIONS[op]
    except KeyError:
        raise ValueError(f"Unknown ALU operation: {op}") from None
    return fn(a & MASK8, b & MASK8)
