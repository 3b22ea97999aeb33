"""Allow `python -m treedigest [ROOT] [OPTIONS]`."""

from treedigest.cli import app

if __name__ == "__main__":
    app(prog_name="treedigest")
