from pathlib import Path
import logging as lg
import sys

import click

from vortex.asm.asm import AssemblyError, assemble


def collect_file(filepath: str | Path) -> str:
    if isinstance(filepath, str):
        filepath = Path(filepath)

    lg.debug(f'Collecting file {filepath}')
    return filepath.read_text(encoding='utf-8')


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.argument('source', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def listing(verbose: bool, source: Path):
    ''' Assemble SOURCE and print the resolved program '''
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info('VORTEX ASM')

    try:
        program = assemble(collect_file(source))
    except AssemblyError as e:
        lg.error(f'{source}: {e}')
        sys.exit(1)

    click.echo(program.listing())


if __name__ == '__main__':
    listing()
