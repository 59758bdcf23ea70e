"""Application CLI principale FiduCam."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

import fiducam
from fiducam.config import ConfigCapture, charger_config

app = typer.Typer(
    name="fiducam",
    help="FiduCam - Capture de justificatifs pour votre fiduciaire",
    no_args_is_help=True,
)

console = Console()

# Options globales stockees via le callback
_config_path: Path | None = None


def get_config_path() -> Path | None:
    """Retourne le chemin du fichier de configuration, s'il a ete donne."""
    return _config_path


def get_config() -> ConfigCapture:
    """Charge la configuration active (fichier, FIDUCAM_CONFIG ou defauts)."""
    try:
        return charger_config(_config_path)
    except ValueError as e:
        # pydantic.ValidationError est une sous-classe de ValueError
        console.print(f"[red]Configuration invalide: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"FiduCam version {fiducam.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Chemin vers le fichier de configuration YAML",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Afficher les messages de journalisation detailles",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Afficher la version de FiduCam",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """FiduCam - Photographier et transmettre ses justificatifs a sa fiduciaire."""
    global _config_path
    _config_path = Path(config) if config else None

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


# Import et enregistrement des sous-commandes
from fiducam.cli.capture import cadre, capturer, compresser, recadrer  # noqa: E402
from fiducam.cli.installation import installation  # noqa: E402

app.command(name="capturer", help="Photographier un document avec la camera")(capturer)
app.command(name="recadrer", help="Recadrer une photo existante selon le cadre")(recadrer)
app.command(name="cadre", help="Calculer le cadre de guidage pour une vue")(cadre)
app.command(name="compresser", help="Compresser une image avant envoi")(compresser)
app.command(name="installation", help="Instructions d'installation de l'application")(
    installation
)
