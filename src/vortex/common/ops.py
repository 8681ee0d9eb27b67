''' Instruction set '''

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Iterator, Sequence

from vortex.common.hwconf import WORD_BITS, WORD_MIN, WORD_MAX


class Opcode(IntEnum):
    # Stack
    NULL = 0x00
    PUSH = 0x01  # n -> push
    DUP = 0x02
    SWAP = 0x03
    POP = 0x04

    # Flow
    RET = 0x05
    JIZ = 0x06  # pop; if 0 goto A
    JNZ = 0x07  # pop; if not 0 goto A

    # Arithmetic
    ADDS = 0x08  # top + n
    ADD = 0x09   # b + a
    SUBS = 0x0A
    SUB = 0x0B
    MULTS = 0x0C
    MULT = 0x0D
    DIVS = 0x0E
    DIV = 0x0F

    # Memory
    MEMWRITE = 0x10   # v1 v2 ... -> M[A], M[A + 1], ...
    MEMWRITES = 0x11  # pop L values -> M[A], M[A + 1], ...
    MEMREAD = 0x12    # M[A] -> push
    PRINT = 0x13      # M[A .. A + L) -> output


class Operand(IntEnum):
    VALUE = 0
    ADDRESS = 1   # memory address
    TARGET = 2    # instruction index or label
    LENGTH = 3


# Operand shapes; the last kind of a VARIADIC shape repeats
SHAPES: dict[Opcode, tuple[Operand, ...]] = {
    Opcode.NULL: (),
    Opcode.PUSH: (Operand.VALUE,),
    Opcode.DUP: (),
    Opcode.SWAP: (),
    Opcode.POP: (),
    Opcode.RET: (),
    Opcode.JIZ: (Operand.TARGET,),
    Opcode.JNZ: (Operand.TARGET,),
    Opcode.ADDS: (Operand.VALUE,),
    Opcode.ADD: (),
    Opcode.SUBS: (Operand.VALUE,),
    Opcode.SUB: (),
    Opcode.MULTS: (Operand.VALUE,),
    Opcode.MULT: (),
    Opcode.DIVS: (Operand.VALUE,),
    Opcode.DIV: (),
    Opcode.MEMWRITE: (Operand.ADDRESS, Operand.VALUE),
    Opcode.MEMWRITES: (Operand.ADDRESS, Operand.LENGTH),
    Opcode.MEMREAD: (Operand.ADDRESS,),
    Opcode.PRINT: (Operand.ADDRESS, Operand.LENGTH),
}

VARIADIC = frozenset([Opcode.MEMWRITE])

JUMPS = frozenset([Opcode.JIZ, Opcode.JNZ])


def fits_word(value: int) -> bool:
    return WORD_MIN <= value <= WORD_MAX


def wrap_word(value: int) -> int:
    ''' Two's complement wrap of an arbitrary int into a signed word '''
    value &= (1 << WORD_BITS) - 1

    if value > WORD_MAX:
        value -= 1 << WORD_BITS

    return value


def arity_fits(opcode: Opcode, count: int) -> bool:
    expected = len(SHAPES[opcode])

    if opcode in VARIADIC:
        return count >= expected

    return count == expected


def operand_kind(opcode: Opcode, position: int) -> Operand:
    shape = SHAPES[opcode]
    return shape[min(position, len(shape) - 1)]


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    operands: tuple[int, ...] = ()

    def __post_init__(self):
        # Accept any sequence, keep a tuple
        object.__setattr__(self, 'opcode', Opcode(self.opcode))
        object.__setattr__(self, 'operands', tuple(self.operands))

        if not arity_fits(self.opcode, len(self.operands)):
            raise ValueError(f'{self.opcode.name} takes {len(SHAPES[self.opcode])} operand(s), got {len(self.operands)}')

        for operand in self.operands:
            if isinstance(operand, bool) or not isinstance(operand, int) or not fits_word(operand):
                raise ValueError(f'{self.opcode.name}: operand {operand!r} is not a {WORD_BITS}-bit signed integer')

    @classmethod
    def of(cls, opcode: Opcode, *operands: int) -> 'Instruction':
        return cls(opcode, operands)

    def __str__(self):
        return ' '.join([self.opcode.name, *(str(o) for o in self.operands)])


class Program(Sequence[Instruction]):
    ''' Resolved, immutable instruction sequence; the index is the jump address '''

    def __init__(self, instructions: Iterable[Instruction] = ()):
        self.instructions = tuple(instructions)

        for instruction in self.instructions:
            if not isinstance(instruction, Instruction):
                raise TypeError(f'Not an instruction: {instruction!r}')

    def __getitem__(self, index):  # type: ignore
        if isinstance(index, slice):
            return Program(self.instructions[index])

        return self.instructions[index]

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Program):
            return NotImplemented

        return self.instructions == other.instructions

    def __hash__(self) -> int:
        return hash(self.instructions)

    def __repr__(self) -> str:
        return f'Program({list(self.instructions)!r})'

    def source(self) -> str:
        ''' Source text which assembles back into this program '''
        return '\n'.join(str(i) for i in self.instructions)

    def listing(self) -> str:
        width = len(str(max(len(self) - 1, 0)))
        return '\n'.join(f'{n:>{width}}: {i}' for n, i in enumerate(self.instructions))
