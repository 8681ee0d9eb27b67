import logging as lg

import pyparsing as pp

import vortex.asm.grammar as grammar
from vortex.asm.fpp import FPP, Pending, LabelRef, BadToken
from vortex.common.ops import (
    Opcode, Operand, Instruction, Program, SHAPES, VARIADIC, arity_fits, fits_word, operand_kind
)


class AssemblyError(Exception):
    ''' Static error; no program is produced '''

    def __init__(self, line: int, message: str, text: str = ''):
        super().__init__(f'line {line}: {message}')
        self.line = line
        self.message = message
        self.text = text


class UnknownOpcode(AssemblyError):
    pass


class MalformedOperand(AssemblyError):
    pass


class WrongOperandArity(AssemblyError):
    pass


class UnresolvedLabel(AssemblyError):
    pass


class DuplicateLabel(AssemblyError):
    pass


MNEMONICS = {op.name: op for op in Opcode}


def first_pass(source: str) -> FPP:
    fpp = FPP()

    for number, text in enumerate(source.splitlines(), start=1):
        fpp.line = number

        try:
            actions = grammar.line.parse_string(text, parse_all=True)
        except pp.ParseException as e:
            raise MalformedOperand(number, f'cannot parse "{text.strip()}" ({e})', text) from e

        for (func, arg) in actions:  # type: ignore
            func(fpp, arg)

    if fpp.duplicates:
        (name, number) = fpp.duplicates[0]
        first = fpp.label_lines[name]
        raise DuplicateLabel(number, f'label "{name}" already defined on line {first}', name)

    return fpp


def resolve_operand(fpp: FPP, pending: Pending, kind: Operand, operand) -> int:
    if isinstance(operand, BadToken):
        raise MalformedOperand(pending.line, f'bad operand "{operand.text}" for {pending.mnemonic}', operand.text)

    if isinstance(operand, LabelRef):
        if kind != Operand.TARGET:
            raise MalformedOperand(
                pending.line,
                f'{pending.mnemonic} expects an integer, got "{operand.name}"',
                operand.name
            )

        if operand.name not in fpp.label_dict:
            raise UnresolvedLabel(pending.line, f'unknown label "{operand.name}"', operand.name)

        address = fpp.label_dict[operand.name]
        lg.debug(f'Ref {operand.name} -> {address}')
        return address

    if not fits_word(operand):
        raise MalformedOperand(pending.line, f'{operand} does not fit a 32-bit word', str(operand))

    if kind == Operand.LENGTH and operand < 0:
        raise MalformedOperand(pending.line, f'negative length {operand}', str(operand))

    return operand


def second_pass(fpp: FPP) -> Program:
    instructions = []

    for pending in fpp.cmd_list:
        opcode = MNEMONICS.get(pending.mnemonic.upper())

        if opcode is None:
            raise UnknownOpcode(pending.line, f'unknown instruction "{pending.mnemonic}"', pending.mnemonic)

        if not arity_fits(opcode, len(pending.operands)):
            expected = len(SHAPES[opcode])
            at_least = 'at least ' if opcode in VARIADIC else ''
            raise WrongOperandArity(
                pending.line,
                f'{opcode.name} takes {at_least}{expected} operand(s), got {len(pending.operands)}',
                pending.mnemonic
            )

        operands = [
            resolve_operand(fpp, pending, operand_kind(opcode, i), operand)
            for i, operand in enumerate(pending.operands)
        ]

        instructions.append(Instruction(opcode, tuple(operands)))

    return Program(instructions)


def assemble(source: str) -> Program:
    fpp = first_pass(source)
    program = second_pass(fpp)
    lg.debug(f'Assembled {len(program)} instruction(s), {len(fpp.label_dict)} label(s)')
    return program
