import pytest

import vortex.asm.asm as asm
from vortex.common.ops import Opcode

from unit_utils import program


def test_backward_reference():
    prog = asm.assemble('''
    main:
        PUSH 10
        SUBS 1
        JNZ main
        RET
    ''')

    assert prog[2].operands == (0,)


def test_forward_reference():
    prog = asm.assemble('''
        PUSH 0
        JIZ done
        PUSH 99
    done:
        RET
    ''')

    assert prog[1].operands == (3,)


def test_labels_do_not_take_a_slot():
    prog = asm.assemble('a:\nb:\n; comment\nc:\nPUSH 1\nd:\nJNZ b\nJIZ d')

    assert len(prog) == 3
    assert prog[1].operands == (0,)
    assert prog[2].operands == (1,)


def test_label_at_end_resolves_past_last_instruction():
    prog = asm.assemble('PUSH 0\nJIZ end\nPUSH 1\nend:')

    assert prog[1].operands == (3,)


def test_label_before_instruction_on_same_line():
    prog = asm.assemble('PUSH 2\nloop: SUBS 1\nDUP\nJNZ loop')

    assert prog[3].operands == (1,)


def test_label_with_comment():
    prog = asm.assemble('top: ; the loop\nPUSH 1\nJNZ top')

    assert prog[1].operands == (0,)


def test_numeric_target():
    prog = asm.assemble('PUSH 1\nJNZ 0')

    assert prog[1].operands == (0,)


def test_labels_are_case_sensitive():
    with pytest.raises(asm.UnresolvedLabel):
        asm.assemble('Loop:\nPUSH 1\nJNZ loop')


def test_alphanumeric_label_names():
    prog = asm.assemble('_1st:\nPUSH 1\nloop_2:\nJNZ _1st\nJIZ loop_2')

    assert [i.operands for i in prog][1:] == [(0,), (1,)]


def test_unresolved_label():
    with pytest.raises(asm.UnresolvedLabel) as e:
        asm.assemble('PUSH 1\nJNZ nowhere')

    assert e.value.line == 2
    assert e.value.text == 'nowhere'


def test_duplicate_label():
    with pytest.raises(asm.DuplicateLabel) as e:
        asm.assemble('a:\nPUSH 1\na:\nRET')

    assert e.value.line == 3


def test_forward_label_matches_numeric_address():
    labelled = asm.assemble('PUSH 1\nJNZ target\nPUSH 2\ntarget:\nRET')
    numeric = asm.assemble('PUSH 1\nJNZ 3\nPUSH 2\nRET')

    assert labelled == numeric
    assert labelled == program((Opcode.PUSH, 1), (Opcode.JNZ, 3), (Opcode.PUSH, 2), (Opcode.RET,))


def test_label_placement_does_not_change_program():
    # Same instruction sequence, label defined on its own line or inline
    separate = asm.assemble('JIZ target\nPUSH 2\ntarget:\nRET')
    inline = asm.assemble('JIZ target\nPUSH 2\ntarget: RET')
    early = asm.assemble('JIZ target\nPUSH 2\ntarget:\n; comment\n\nRET')

    assert separate == inline == early
