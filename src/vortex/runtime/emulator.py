import sys
from pathlib import Path
import logging as lg

import click

from vortex.common.hwconf import DEFAULT_MAX_STEPS
from vortex.common.ops import Program
from vortex.asm.asm import AssemblyError, assemble
from vortex.asm.vasm import collect_file
import vortex.runtime.cpu as cpu


EXIT_HALT = 0
EXIT_ASM_ERROR = 1
EXIT_KEYBOARD = 3
EXIT_STEP_LIMIT = 4
EXIT_EXEC_ERROR = 100


class StepLimitExceeded(cpu.ExecutionError):
    pass


def execute(program: Program, max_steps: int | None = None) -> cpu.ExecutionResult:
    proc = cpu.CPU(program)

    while proc.step():
        if max_steps is not None and proc.steps >= max_steps:
            raise StepLimitExceeded(proc.ip, proc.current, f'no halt after {max_steps} steps')

    return proc.result()


def execute_source(source: str, max_steps: int | None = None) -> cpu.ExecutionResult:
    return execute(assemble(source), max_steps)


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug (traces every step)')
@click.option('--max-steps', type=click.IntRange(min=1), default=DEFAULT_MAX_STEPS, show_default=True,
              help='Stop a program which runs longer than this')
@click.argument('source_filename', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def run(verbose: bool, max_steps: int, source_filename: Path):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info('VORTEX')

    try:
        program = assemble(collect_file(source_filename))
        result = execute(program, max_steps)

    except AssemblyError as e:
        lg.error(f'Assembly failed on {e}')
        sys.exit(EXIT_ASM_ERROR)

    except StepLimitExceeded as e:
        lg.error(f'Execution stopped at {e}')
        sys.exit(EXIT_STEP_LIMIT)

    except cpu.ExecutionError as e:
        lg.error(f'Execution halted on error at {e}')
        sys.exit(EXIT_EXEC_ERROR)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    click.echo(result.text, nl=False)
    lg.info(f'Execution halted gracefully after {result.steps} step(s)')
    lg.info(f'Final stack: {result.stack}')
    sys.exit(EXIT_HALT)


if __name__ == '__main__':
    run()
