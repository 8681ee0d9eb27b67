# type: ignore
''' Line grammar '''

import pyparsing as pp

from vortex.asm.fpp import FPP, LabelRef, BadToken


ID_RE = r'(?![0-9]+(?![A-Za-z0-9_]))[A-Za-z0-9_]+'
END_RE = r'(?![^\s;])'

comment = pp.Suppress(pp.Literal(';') + pp.rest_of_line)

label = (pp.Regex(ID_RE) + pp.Suppress(':')).set_parse_action(lambda r: (FPP.on_label, r))

s_dec_const = pp.Regex(r'[+-]?[0-9]+' + END_RE).set_parse_action(lambda r: int(r[0]))
ref = pp.Regex(ID_RE + END_RE).set_parse_action(lambda r: LabelRef(r[0]))
bad = pp.Regex(r'[^\s;]+').set_parse_action(lambda r: BadToken(r[0]))

operand = s_dec_const | ref | bad

mnemonic = pp.Regex(r'[^\s;]+')

instruction = (mnemonic + pp.Group(pp.ZeroOrMore(operand))).set_parse_action(lambda r: (FPP.on_instruction, r))

statement = pp.Optional(label) + pp.Optional(instruction) + pp.Optional(comment)

line = statement + pp.StringEnd()

