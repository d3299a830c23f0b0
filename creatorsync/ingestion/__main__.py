"""Run the per-target sync for the current directory: ``python -m creatorsync.ingestion``."""

from ..cli import sync

if __name__ == "__main__":
    sync(prog_name="python -m creatorsync.ingestion")
