import logging as lg
from dataclasses import dataclass, field
from typing import Any, Dict, List

Tokens = List[Any]


@dataclass(frozen=True)
class LabelRef:
    name: str


@dataclass(frozen=True)
class BadToken:
    text: str


@dataclass
class Pending:
    ''' Instruction seen by the first pass, operands not yet checked '''
    line: int
    mnemonic: str
    operands: list = field(default_factory=list)


class FPP:
    ''' First pass processor '''
    cmd_list: List[Pending]
    label_dict: Dict[str, int]
    label_lines: Dict[str, int]

    def __init__(self):
        self.cmd_list = list()
        self.offset = 0     # index of the next emitted instruction
        self.line = 0
        self.label_dict = dict()
        self.label_lines = dict()
        self.duplicates: List[tuple[str, int]] = list()

    # Handlers
    def on_label(self, tokens: Tokens):
        labelname = str(tokens[0])

        if labelname in self.label_dict:
            self.duplicates.append((labelname, self.line))
            return

        self.label_dict[labelname] = self.offset
        self.label_lines[labelname] = self.line
        lg.debug(f'Label {labelname} @ {self.offset}')

    def on_instruction(self, tokens: Tokens):
        mnemonic = str(tokens[0])
        operands = list(tokens[1])
        self.cmd_list.append(Pending(self.line, mnemonic, operands))
        self.offset += 1
