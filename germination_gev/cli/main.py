"""Typer CLI entrypoint with structured error handling."""

from __future__ import annotations

import sys

import typer

from germination_gev.cli.commands.fit import fit
from germination_gev.exceptions import (
    ConfigValidationError,
    DataIntegrityError,
    DistributionFitError,
    PlottingError,
)
from germination_gev.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Germination-time GEV model comparison")


app.command()(fit)


@app.callback()
def _root() -> None:
    """Fit GEV treatment models to germination times."""


log = get_logger(__name__, component="cli")


def main() -> None:
    configure_logging(component="cli")
    try:
        app()
    except ConfigValidationError as exc:
        log.error(str(exc))
        raise SystemExit(1)
    except DataIntegrityError as exc:
        log.error(f"Data validation failed: {exc}")
        raise SystemExit(2)
    except DistributionFitError as exc:
        log.error(f"Distribution fitting failed: {exc}")
        raise SystemExit(3)
    except PlottingError as exc:
        log.error(f"Plotting failed: {exc}")
        raise SystemExit(4)
    except KeyboardInterrupt:
        log.info("Interrupted")
        raise SystemExit(130)
    except Exception:
        log.exception("Unhandled exception")
        raise SystemExit(255)


if __name__ == "__main__":
    sys.exit(main())
