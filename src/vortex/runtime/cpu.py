import logging as lg
from dataclasses import dataclass, field
from typing import Callable

from vortex.common.hwconf import MEMORY_SIZE
from vortex.common.ops import Opcode, Instruction, Program, wrap_word


class ExecutionError(Exception):
    ''' Dynamic error; execution stops at the failing instruction '''

    def __init__(self, ip: int, instruction: Instruction | None, message: str):
        super().__init__(f'ip {ip} ({instruction}): {message}')
        self.ip = ip
        self.instruction = instruction
        self.message = message


class StackUnderflow(ExecutionError):
    pass


class MemoryOutOfBounds(ExecutionError):
    pass


class InvalidJumpTarget(ExecutionError):
    pass


def trunc_div(b: int, a: int) -> int:
    q = abs(b) // abs(a)
    return q if (a < 0) == (b < 0) else -q


@dataclass
class ExecutionResult:
    stack: list[int]
    output: bytes
    memory: list[int] = field(repr=False, default_factory=list)
    steps: int = 0

    @property
    def top(self) -> int | None:
        return self.stack[-1] if self.stack else None

    @property
    def text(self) -> str:
        return self.output.decode('latin-1')


class CPU():
    ip: int               # Instruction pointer
    stack: list[int]
    memory: list[int]
    output: bytearray
    halted: bool
    steps: int

    def __init__(self, program: Program):
        self.program = program

        self.ip = 0
        self.stack = []
        self.memory = [0] * MEMORY_SIZE
        self.output = bytearray()
        self.halted = False
        self.steps = 0

        self.current: Instruction | None = None
        self.jumped = False

    # - Helpers - #

    def debug_dump(self):
        top = self.stack[-1] if self.stack else '-'
        lg.debug(f'IP:{self.ip} SP:{len(self.stack)} TOP:{top} STEPS:{self.steps}')

    def fail(self, error: type[ExecutionError], message: str):
        raise error(self.ip, self.current, message)

    def require(self, depth: int):
        if len(self.stack) < depth:
            self.fail(StackUnderflow, f'needs {depth} stack value(s), has {len(self.stack)}')

    def check_range(self, addr: int, length: int = 1):
        if addr < 0 or length < 0 or addr + length > MEMORY_SIZE:
            self.fail(MemoryOutOfBounds, f'range {addr}..{addr + length} outside 0..{MEMORY_SIZE}')

    def arithm_pair(self, op: Callable[[int, int], int]):
        self.require(2)
        a = self.stack.pop()
        b = self.stack.pop()
        self.stack.append(wrap_word(op(b, a)))

    def arithm_top(self, op: Callable[[int, int], int]):
        self.require(1)
        (n,) = self.current.operands  # type: ignore
        self.stack[-1] = wrap_word(op(self.stack[-1], n))

    def jump_if(self, cond: Callable[[int], bool]):
        self.require(1)
        (addr,) = self.current.operands  # type: ignore

        if not cond(self.stack[-1]):
            self.stack.pop()
            return

        # Jump target may be one past the end: implicit halt
        if not 0 <= addr <= len(self.program):
            self.fail(InvalidJumpTarget, f'target {addr} outside 0..{len(self.program)}')

        self.stack.pop()
        self.ip = addr
        self.jumped = True

    # - Operations - #

    def null(self):
        pass

    def push(self):
        (n,) = self.current.operands  # type: ignore
        self.stack.append(n)

    def pop(self):
        self.require(1)
        self.stack.pop()

    def dup(self):
        self.require(1)
        self.stack.append(self.stack[-1])

    def swap(self):
        self.require(2)
        self.stack[-1], self.stack[-2] = self.stack[-2], self.stack[-1]

    def ret(self):
        self.halted = True

    def jnz(self):
        self.jump_if(lambda v: v != 0)

    def jiz(self):
        self.jump_if(lambda v: v == 0)

    # - Arithmetic - #

    def add(self):
        self.arithm_pair(lambda b, a: b + a)

    def adds(self):
        self.arithm_top(lambda t, n: t + n)

    def sub(self):
        self.arithm_pair(lambda b, a: b - a)

    def subs(self):
        self.arithm_top(lambda t, n: t - n)

    def mult(self):
        self.arithm_pair(lambda b, a: b * a)

    def mults(self):
        self.arithm_top(lambda t, n: t * n)

    def div(self):
        # Division by zero leaves the dividend
        self.arithm_pair(lambda b, a: b if a == 0 else trunc_div(b, a))

    def divs(self):
        self.arithm_top(lambda t, n: t if n == 0 else trunc_div(t, n))

    # - Memory - #

    def memwrite(self):
        (addr, *values) = self.current.operands  # type: ignore
        self.check_range(addr, len(values))
        self.memory[addr:addr + len(values)] = values

    def memwrites(self):
        (addr, length) = self.current.operands  # type: ignore
        self.check_range(addr, length)
        self.require(length)

        for offset in range(length):
            self.memory[addr + offset] = self.stack.pop()

    def memread(self):
        (addr,) = self.current.operands  # type: ignore
        self.check_range(addr)
        self.stack.append(self.memory[addr])

    def print_mem(self):
        (addr, length) = self.current.operands  # type: ignore
        self.check_range(addr, length)
        self.output += bytes(v & 0xFF for v in self.memory[addr:addr + length])

    HANDLERS = {
        Opcode.NULL: null,
        Opcode.PUSH: push,
        Opcode.POP: pop,
        Opcode.DUP: dup,
        Opcode.SWAP: swap,
        Opcode.RET: ret,
        Opcode.JNZ: jnz,
        Opcode.JIZ: jiz,

        Opcode.ADD: add,
        Opcode.ADDS: adds,
        Opcode.SUB: sub,
        Opcode.SUBS: subs,
        Opcode.MULT: mult,
        Opcode.MULTS: mults,
        Opcode.DIV: div,
        Opcode.DIVS: divs,

        Opcode.MEMWRITE: memwrite,
        Opcode.MEMWRITES: memwrites,
        Opcode.MEMREAD: memread,
        Opcode.PRINT: print_mem,
    }

    # -- Implementation -- #

    @property
    def running(self) -> bool:
        return not self.halted

    def step(self) -> bool:
        ''' Execute one instruction; returns False once the machine has halted '''
        if self.halted:
            return False

        if self.ip >= len(self.program):
            self.halted = True
            return False

        self.current = self.program[self.ip]
        self.jumped = False

        handler = self.HANDLERS[self.current.opcode]
        handler(self)

        self.steps += 1

        if not self.jumped and not self.halted:
            self.ip += 1

        if self.ip >= len(self.program):
            self.halted = True

        self.debug_dump()

        return not self.halted

    def result(self) -> ExecutionResult:
        return ExecutionResult(list(self.stack), bytes(self.output), list(self.memory), self.steps)

    def run(self) -> ExecutionResult:
        while self.step():
            pass

        return self.result()
