import pytest

import vortex.asm.asm as asm
import vortex.runtime.cpu as cpu

import unit_utils


def test_hello():
    result = unit_utils.run_file('hello.vvm')

    assert result.text == 'Hello, world!\n'
    assert result.stack == []


def test_multiply():
    result = unit_utils.run_file('multiply.vvm')

    assert result.stack == [20]
    assert result.output == b''


def test_factorial():
    result = unit_utils.run_file('factorial.vvm')

    assert result.stack == [120]
    assert result.top == 120


def test_countdown():
    result = unit_utils.run_file('countdown.vvm')

    assert result.text == '321\n'
    assert result.stack == [0]


def test_hi():
    result = unit_utils.run_source('MEMWRITE 0 72 105\nPRINT 0 2')

    assert result.output == b'Hi'


def test_underflow_at_second_pop():
    with pytest.raises(cpu.StackUnderflow) as e:
        unit_utils.run_file('underflow.vvm')

    assert e.value.ip == 2


def test_memread_past_memory():
    proc = cpu.CPU(asm.assemble('MEMREAD 2048'))

    with pytest.raises(cpu.MemoryOutOfBounds):
        proc.run()

    assert proc.stack == []


def test_memory_round_trip():
    result = unit_utils.run_source('''
    start:
        Push 1
        Push 2
        Push 3
        MemWriteS 10 3  ; 3 -> 10, 2 -> 11, 1 -> 12
        MemRead 12
        MemRead 11
        MemRead 10
        Ret
    ''')

    assert result.stack == [1, 2, 3]
    assert result.memory[10:13] == [3, 2, 1]


def test_arithmetic_chain():
    result = unit_utils.run_source('''
        Push 10
        AddS 5      ; 15
        Push 3
        Mult        ; 45
        Push 5
        Sub         ; 40
        Push 2
        Div         ; 20
        Ret
    ''')

    assert result.stack == [20]


def test_string_edit():
    result = unit_utils.run_source('''
        MemWrite 0 72 101 108 108 111 32 87 111 114 108 100 33
        Print 0 12
        MemWrite 1 105 33
        Print 0 3
        Ret
    ''')

    assert result.text == 'Hello World!Hi!'
    assert result.memory[6] == 87
