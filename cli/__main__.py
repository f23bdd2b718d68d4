"""
Allows running the CLI without installation:
    python -m cli translate --from model --to synthesize -i model.json
"""

from . import cli

if __name__ == '__main__':
    cli()
